"""HTTP and command-line entry points for RagDesk."""
