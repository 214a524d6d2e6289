"""Tests for action-suggestion parsing and matching."""

from types import SimpleNamespace

from conftest import ACTION_RESPONSE
from ragdesk.service.actions import ParsedAction, match_action, parse_action_from_response


class TestParseActionFromResponse:
    """Tests for parse_action_from_response."""

    def test_parses_complete_suggestion(self):
        parsed = parse_action_from_response(ACTION_RESPONSE)

        assert parsed == ParsedAction(
            action_name="cancel_subscription",
            parameters={"subscriptionId": "sub_123"},
            explanation="I will cancel your subscription.",
        )

    def test_no_action_line_returns_none(self):
        assert parse_action_from_response("Your plan renews on the 5th.") is None

    def test_action_must_start_the_line(self):
        text = "You could say ACTION: cancel_subscription to do that."
        assert parse_action_from_response(text) is None

    def test_action_name_must_be_a_single_word(self):
        assert parse_action_from_response("ACTION: cancel subscription") is None

    def test_action_name_is_ascii_only(self):
        assert parse_action_from_response("ACTION: cancelaci\u00f3n") is None

    def test_invalid_json_parameters_default_to_empty(self):
        text = "ACTION: refund\nPARAMETERS: not valid json\nEXPLANATION: Refund it."
        parsed = parse_action_from_response(text)

        assert parsed.action_name == "refund"
        assert parsed.parameters == {}
        assert parsed.explanation == "Refund it."

    def test_non_object_json_parameters_default_to_empty(self):
        for raw in ('["a", "b"]', '"text"', "null", "42"):
            parsed = parse_action_from_response(f"ACTION: refund\nPARAMETERS: {raw}")
            assert parsed.parameters == {}

    def test_missing_parameters_and_explanation(self):
        parsed = parse_action_from_response("Sure.\nACTION: refund")

        assert parsed.action_name == "refund"
        assert parsed.parameters == {}
        assert parsed.explanation == ""


class TestMatchAction:
    """Tests for match_action."""

    actions = [
        SimpleNamespace(name="cancel_subscription"),
        SimpleNamespace(name="send_invoice"),
    ]

    def test_exact_name_match(self):
        parsed = ParsedAction(action_name="send_invoice")
        assert match_action(parsed, self.actions) is self.actions[1]

    def test_unknown_name_returns_none(self):
        parsed = ParsedAction(action_name="delete_account")
        assert match_action(parsed, self.actions) is None

    def test_match_is_case_sensitive(self):
        parsed = ParsedAction(action_name="Send_Invoice")
        assert match_action(parsed, self.actions) is None

    def test_nothing_parsed_returns_none(self):
        assert match_action(None, self.actions) is None
