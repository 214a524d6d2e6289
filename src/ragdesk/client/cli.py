"""Command-line interface for RagDesk using Click."""

import asyncio
from pathlib import Path

import click
from dotenv import load_dotenv

from ragdesk.client.cli_helpers import ensure_database_exists, format_action, format_source
from ragdesk.client.services import build_services
from ragdesk.constants import DEFAULT_COLLECTION
from ragdesk.errors import RagDeskError
from ragdesk.service.database import create_document_store, ensure_index_exists
from ragdesk.service.ingest import ingest_document

# Load environment variables
load_dotenv()


@click.command()
@click.option(
    "--create-database",
    "create_database_flag",
    is_flag=True,
    default=False,
    help="Create the RavenDB database if it doesn't exist",
)
def init(create_database_flag: bool) -> None:
    """Prepare RavenDB: check the database and create the vector index.

    Example:
        ragdesk-init
        ragdesk-init --create-database
    """
    ensure_database_exists(create_if_missing=create_database_flag)

    store = create_document_store()
    try:
        if ensure_index_exists(store):
            click.echo("✓ Vector index created")
        else:
            click.echo("✓ Vector index already exists")
    except Exception as e:
        click.echo(f"✗ Failed to create vector index: {e}", err=True)
        raise click.Abort()
    finally:
        store.close()


@click.command()
@click.argument(
    "file",
    type=click.Path(exists=True, file_okay=True, dir_okay=False, path_type=Path),
)
@click.option("--project-id", required=True, help="Project to index the document into")
@click.option(
    "--collection",
    type=str,
    default=DEFAULT_COLLECTION,
    help=f"Collection label for the document (default: '{DEFAULT_COLLECTION}')",
)
def index(file: Path, project_id: str, collection: str) -> None:
    """Index a UTF-8 text FILE into a project's knowledge base.

    Example:
        ragdesk-index faq.md --project-id 3f2b...
        ragdesk-index pricing.txt --project-id 3f2b... --collection sales
    """
    ensure_database_exists()

    try:
        text = file.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        click.echo(f"✗ {file.name} is not UTF-8 text: {e}", err=True)
        raise click.Abort()

    services = build_services()
    try:
        if services.repository.get_project(project_id) is None:
            click.echo(f"✗ Project {project_id} not found", err=True)
            raise click.Abort()

        click.echo(f"📄 Indexing {file.name} (collection: '{collection}')...")
        document_id, result = asyncio.run(
            ingest_document(
                services.repository,
                services.embeddings,
                services.vector_store,
                project_id,
                text,
                file.name,
                collection,
            )
        )
        click.echo(f"✓ Indexed {result.chunk_count} chunk(s) as document {document_id}")
    except RagDeskError as e:
        click.echo(f"✗ Indexing failed: {e.message}", err=True)
        raise click.Abort()
    finally:
        services.store.close()


async def _print_stream(services, project_id: str, question: str, conversation_id: str) -> None:
    sources: list[dict] = []
    async for event in services.pipeline.retrieve_and_generate_stream(
        project_id, question, conversation_id
    ):
        if event["type"] == "sources":
            sources = event["data"]
        elif event["type"] == "delta":
            click.echo(event["text"], nl=False)
        elif event["type"] == "action":
            click.echo("\n\n" + format_action(event["action"]))
        elif event["type"] == "error":
            click.echo(f"\n✗ {event['message']}", err=True)
            raise click.Abort()

    click.echo("")
    if sources:
        click.echo("\n📚 Sources:")
        for i, source in enumerate(sources, 1):
            click.echo(format_source(i, source))


@click.command()
@click.argument("project_id", type=str)
@click.argument("question", type=str)
@click.option(
    "--stream/--no-stream",
    default=True,
    help="Print the answer as it is generated (default: stream)",
)
def ask(project_id: str, question: str, stream: bool) -> None:
    """Ask a project's assistant a QUESTION from the terminal.

    Example:
        ragdesk-ask 3f2b... "How do I cancel my plan?"
        ragdesk-ask 3f2b... "What does the pro tier include?" --no-stream
    """
    services = build_services()
    try:
        if services.repository.get_project(project_id) is None:
            click.echo(f"✗ Project {project_id} not found", err=True)
            raise click.Abort()

        conversation_id = services.repository.create_conversation(project_id)
        services.repository.add_message(conversation_id, "user", question)
        services.repository.touch_conversation(conversation_id)

        if stream:
            asyncio.run(_print_stream(services, project_id, question, conversation_id))
            return

        result = asyncio.run(
            services.pipeline.retrieve_and_generate(project_id, question, conversation_id)
        )
        click.echo(result.content)
        if result.sources:
            click.echo("\n📚 Sources:")
            for i, source in enumerate(result.sources, 1):
                click.echo(format_source(i, source.to_dict()))
        if result.action is not None:
            click.echo("\n" + format_action(result.action.to_dict()))
    except RagDeskError as e:
        click.echo(f"✗ {e.message}", err=True)
        raise click.Abort()
    finally:
        services.store.close()


if __name__ == "__main__":
    ask()
