"""Tests for sketch_calc.prompt — the shared calculator prompt."""

from sketch_calc.prompt import CALCULATOR_PROMPT, format_request


class TestPromptContent:
    # ── Response contract ─────────────────────────────────────────────────

    def test_names_every_response_key(self):
        for key in ('"expr"', '"result"', '"assign"'):
            assert key in CALCULATOR_PROMPT

    def test_asks_for_a_json_list(self):
        assert "JSON list" in CALCULATOR_PROMPT

    def test_describes_empty_reply(self):
        assert "[]" in CALCULATOR_PROMPT

    def test_forbids_code_fences(self):
        assert "code fences" in CALCULATOR_PROMPT

    # ── Evaluation rules ──────────────────────────────────────────────────

    def test_mentions_order_of_operations(self):
        assert "order of operations" in CALCULATOR_PROMPT.lower()

    def test_explains_variable_substitution(self):
        assert "variables" in CALCULATOR_PROMPT.lower()

    def test_explains_assignment_flag(self):
        assert "assigns a value to a variable" in CALCULATOR_PROMPT


class TestFormatRequest:
    def test_empty_scope(self):
        assert format_request({}).endswith("Variables in scope: {}.")

    def test_variables_serialised_as_json(self):
        text = format_request({"y": "2", "x": "5"})
        assert '{"x": "5", "y": "2"}' in text
