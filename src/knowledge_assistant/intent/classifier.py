"""Rule-based intent classification."""

import logging
from dataclasses import dataclass, field

from knowledge_assistant.intent.rules import (
    INTENT_PRIORITY,
    INTERROGATIVE_START,
    RULE_WEIGHT,
    RULES,
    Intent,
    IntentRule,
)

logger = logging.getLogger(__name__)

MAX_SCORE = 1.0
DEFAULT_CONFIDENCE = 0.5


@dataclass(frozen=True)
class IntentResult:
    """Outcome of classifying one query."""

    intent: Intent
    confidence: float
    captured_groups: dict[str, tuple[str, ...]] = field(default_factory=dict)
    is_question_form: bool = False
    scores: dict[Intent, float] = field(default_factory=dict)


def is_question_form(normalized_query: str, raw_query: str | None = None) -> bool:
    """Query ends with a question mark or opens with an interrogative word.

    Normalization strips the trailing '?', so the raw query is checked too.
    """
    for text in (raw_query, normalized_query):
        if text and text.rstrip().endswith("?"):
            return True
    return bool(INTERROGATIVE_START.match(normalized_query.strip().lower()))


def classify(
    normalized_query: str,
    raw_query: str | None = None,
    rules: tuple[IntentRule, ...] = RULES,
) -> IntentResult:
    """Score a normalized query against the rule table.

    Each matching rule adds its weight to its intent, capped at 1.0. The
    highest score wins and ties go to the earlier intent in priority order.
    Without any intent reaching one rule weight the query is a question at
    0.5. Question-form queries are never classified as learning.
    """
    text = normalized_query.strip().lower()
    question_form = is_question_form(text, raw_query)

    scores: dict[Intent, float] = {intent: 0.0 for intent in INTENT_PRIORITY}
    captured: dict[str, tuple[str, ...]] = {}
    for rule in rules:
        match = rule.pattern.search(text)
        if not match:
            continue
        scores[rule.intent] = min(MAX_SCORE, scores[rule.intent] + rule.weight)
        if rule.name:
            groups = tuple(g for g in match.groups() if g is not None)
            captured[rule.name] = groups or (match.group(0),)

    if raw_query and raw_query.rstrip().endswith("?"):
        scores[Intent.QUESTION] = min(MAX_SCORE, scores[Intent.QUESTION] + RULE_WEIGHT)

    if question_form:
        scores[Intent.LEARNING] = 0.0

    best = Intent.QUESTION
    best_score = 0.0
    for intent in INTENT_PRIORITY:
        if scores[intent] > best_score:
            best, best_score = intent, scores[intent]

    if best_score < RULE_WEIGHT:
        result = IntentResult(
            intent=Intent.QUESTION,
            confidence=DEFAULT_CONFIDENCE,
            captured_groups=captured,
            is_question_form=question_form,
            scores=scores,
        )
    else:
        result = IntentResult(
            intent=best,
            confidence=round(best_score, 4),
            captured_groups=captured,
            is_question_form=question_form,
            scores=scores,
        )

    logger.debug(
        f"Intent for '{text}': {result.intent.value} ({result.confidence:.2f}), "
        f"question_form={question_form}"
    )
    return result
