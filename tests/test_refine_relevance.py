"""Tests for web answer relevance and factual answer refinement."""

import pytest

from knowledge_assistant.orchestrator.refine import (
    is_factual_question,
    refine_factual_response,
    truncate_to_first_sentence,
    truncate_to_relevant_content,
)
from knowledge_assistant.orchestrator.relevance import is_relevant_answer, query_keywords

LONG_JUPITER = (
    "Jupiter has 95 officially recognised moons. The four largest are the Galilean moons. "
    "Ganymede is the largest moon in the Solar System. Many of the smaller moons are captured "
    "asteroids. New moons are still being discovered."
)


class TestRelevance:
    """Tests for is_relevant_answer()."""

    def test_keywords(self):
        """Stopwords and words of two letters or fewer are not keywords."""
        assert query_keywords("what is the capital of france?") == ["capital", "france"]

    def test_relevant_factual_answer(self):
        assert is_relevant_answer(
            "what is the capital of france",
            "Paris is the capital and most populous city of France.",
        )

    def test_short_answer_rejected(self):
        assert not is_relevant_answer("what is the capital of france", "Paris, France.")

    def test_unrelated_answer_rejected(self):
        assert not is_relevant_answer(
            "what is the capital of france",
            "Bananas are yellow fruits grown in tropical regions around the world.",
        )

    def test_phrase_match_for_non_factual_query(self):
        assert is_relevant_answer(
            "python list comprehension syntax",
            "In Python, a list comprehension offers a shorter syntax for creating lists.",
        )

    def test_query_without_keywords(self):
        assert not is_relevant_answer("what is it", "Something long enough to be an answer here.")

    def test_empty(self):
        assert not is_relevant_answer("", "answer")
        assert not is_relevant_answer("query", "")


class TestRefine:
    """Tests for refine_factual_response()."""

    def test_is_factual_question(self):
        assert is_factual_question("how many moons does jupiter have")
        assert is_factual_question("population of canada")
        assert not is_factual_question("jupiter facts")

    def test_short_answer_unchanged(self):
        """Answers of 100 characters or less are never refined."""
        answer = "Paris is the capital of France."
        assert refine_factual_response("what is the capital of france", answer) == answer

    def test_long_factual_answer_keeps_three_sentences(self):
        refined = refine_factual_response("how many moons does jupiter have", LONG_JUPITER)

        assert refined.startswith("Jupiter has 95 officially recognised moons.")
        assert refined.endswith("Solar System.")
        assert "asteroids" not in refined

    def test_non_factual_query_unchanged(self):
        assert refine_factual_response("jupiter facts", LONG_JUPITER) == LONG_JUPITER

    def test_definition_picks_sentence_about_term(self):
        response = (
            "Photosynthesis is the process by which green plants turn light into chemical energy. "
            "It takes place in the chloroplasts. The word comes from Greek."
        )
        refined = refine_factual_response("what is photosynthesis", response)

        assert refined == (
            "Photosynthesis is the process by which green plants turn light into chemical energy."
        )

    def test_empty_inputs(self):
        assert refine_factual_response("", "text") == "text"
        assert refine_factual_response("query", "") == ""


class TestTruncation:
    """Tests for the truncation helpers."""

    def test_first_sentence(self):
        assert truncate_to_first_sentence("One. Two.") == "One."
        assert truncate_to_first_sentence("x" * 150).endswith("...")

    def test_relevant_content_keeps_short_text(self):
        assert truncate_to_relevant_content("One. Two.") == "One. Two."
