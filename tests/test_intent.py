"""Tests for intent classification and teach command parsing."""

import pytest

from knowledge_assistant.intent import (
    Intent,
    classify,
    has_teach_lead_in,
    is_question_form,
    parse_teach_command,
    strip_correction,
)
from knowledge_assistant.text.normalizer import normalize


def classify_raw(raw: str):
    return classify(normalize(raw), raw)


class TestClassify:
    """Tests for classify()."""

    def test_question_mark_overrides_learning(self):
        """'what is water?' is a question even though it contains 'is'."""
        result = classify_raw("what is water?")

        assert result.intent == Intent.QUESTION
        assert result.is_question_form is True
        assert result.scores[Intent.LEARNING] == 0.0

    def test_interrogative_without_question_mark(self):
        result = classify_raw("who wrote hamlet")
        assert result.intent == Intent.QUESTION
        assert result.is_question_form is True

    def test_declarative_fact_is_learning(self):
        result = classify_raw("Paris is the capital of France")
        assert result.intent == Intent.LEARNING
        assert result.is_question_form is False

    def test_explicit_teach_scores_higher(self):
        """A teach command matching several rules gains confidence."""
        result = classify_raw("remember that the wifi password is guest123")
        assert result.intent == Intent.LEARNING
        assert result.confidence >= 0.5

    @pytest.mark.parametrize("raw", ["hello", "Good morning!", "thanks", "how are you"])
    def test_greetings(self, raw):
        assert classify_raw(raw).intent == Intent.GREETING

    def test_correction(self):
        result = classify_raw("No, that's wrong. The wifi password is guest456")
        assert result.intent == Intent.CORRECTION
        assert result.confidence == 0.5

    def test_default_is_question(self):
        """Without any rule reaching one weight the query is a question at 0.5."""
        result = classify_raw("zorblax quantum flux")
        assert result.intent == Intent.QUESTION
        assert result.confidence == 0.5

    def test_confidence_capped(self):
        result = classify_raw("hello, good morning, nice to meet you, how are you")
        assert result.confidence <= 1.0

    def test_captured_groups(self):
        result = classify_raw("hello there")
        assert result.captured_groups["hello"] == ("hello",)


class TestIsQuestionForm:
    """Tests for is_question_form()."""

    def test_raw_question_mark(self):
        """The raw query is checked because normalization strips the '?'."""
        assert is_question_form("paris is nice", "Paris is nice?") is True

    def test_statement(self):
        assert is_question_form("paris is nice", "Paris is nice") is False


class TestParseTeachCommand:
    """Tests for parse_teach_command()."""

    def test_remember_that(self):
        command = parse_teach_command("remember that the capital of France is Paris")

        assert command.question == "the capital of France"
        assert command.answer == "Paris"
        assert command.explicit is True
        assert command.form == "learn_that"

    def test_definition(self):
        command = parse_teach_command("API means application programming interface")

        assert command.question == "API"
        assert command.answer == "application programming interface"
        assert command.form == "definition"

    def test_when_asked(self):
        command = parse_teach_command("when someone asks about the office wifi, say guest123")

        assert command.question == "the office wifi"
        assert command.answer == "guest123"

    def test_key_value(self):
        command = parse_teach_command("wifi password: guest123")

        assert command.question == "wifi password"
        assert command.answer == "guest123"

    def test_plain_statement_stores_whole_sentence(self):
        """A declarative fact is stored under itself, answered by itself."""
        command = parse_teach_command("Paris is the capital of France")

        assert command.question == "Paris is the capital of France"
        assert command.answer == "Paris is the capital of France."
        assert command.subject == "Paris"
        assert command.value == "the capital of France"
        assert command.explicit is False

    @pytest.mark.parametrize(
        "text",
        ["what is water?", "what is water", "it is raining", "hello", "", "   "],
    )
    def test_not_a_teach_command(self, text):
        assert parse_teach_command(text) is None

    def test_non_string(self):
        assert parse_teach_command(None) is None


class TestTeachHelpers:
    """Tests for has_teach_lead_in() and strip_correction()."""

    def test_lead_in(self):
        assert has_teach_lead_in("Please remember this") is True
        assert has_teach_lead_in("teach you something") is True
        assert has_teach_lead_in("Paris is nice") is False

    def test_strip_correction(self):
        stripped = strip_correction("No, that's wrong. The wifi password is guest456")
        assert stripped == "The wifi password is guest456"

    def test_strip_correction_leaves_plain_text(self):
        assert strip_correction("The wifi password is guest456") == "The wifi password is guest456"
