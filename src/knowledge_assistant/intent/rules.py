"""Declarative intent rule table.

Every rule is a regular expression evaluated against the normalized query.
A matching rule adds its weight to its intent's score; scoring lives in
knowledge_assistant.intent.classifier.
"""

import re
from dataclasses import dataclass
from enum import Enum

RULE_WEIGHT = 0.25


class Intent(str, Enum):
    """What the user is trying to do."""

    LEARNING = "learning"
    GREETING = "greeting"
    CORRECTION = "correction"
    QUESTION = "question"


# Tie-break order: earlier wins
INTENT_PRIORITY = (Intent.LEARNING, Intent.GREETING, Intent.CORRECTION, Intent.QUESTION)


@dataclass(frozen=True)
class IntentRule:
    """A single pattern contributing weight to one intent."""

    pattern: re.Pattern
    intent: Intent
    weight: float = RULE_WEIGHT
    name: str = ""


def _rule(intent: Intent, name: str, pattern: str) -> IntentRule:
    return IntentRule(pattern=re.compile(pattern), intent=intent, name=name)


INTERROGATIVE_START = re.compile(
    r"^(?:what|what's|whats|who|who's|whom|whose|when|where|where's|why|which|how|how's)\b"
)

AUXILIARY_START = re.compile(
    r"^(?:is|are|was|were|do|does|did|can|could|would|will|should|has|have|had)\s"
)

RULES: tuple[IntentRule, ...] = (
    # Teach / learn
    _rule(Intent.LEARNING, "learn_command", r"^(?:please\s+)?(?:learn|remember|memorize|memorise)\b"),
    _rule(Intent.LEARNING, "teach_command", r"^(?:let me\s+)?teach\b|\bi(?:'ll| will) teach you\b"),
    _rule(Intent.LEARNING, "note_that", r"^(?:note|save|store|keep in mind)\s+(?:that|this)\b"),
    _rule(Intent.LEARNING, "when_asked", r"^(?:when|if)\s+(?:someone|somebody|anyone|anybody|people|i|they)\s+asks?\b"),
    _rule(Intent.LEARNING, "definition", r"\b(?:means|stands for|refers to|is defined as)\b"),
    _rule(Intent.LEARNING, "answer_is", r"^the (?:answer|definition|meaning) (?:to|of|for)\b"),
    _rule(Intent.LEARNING, "statement", r"^[\w'-]+(?:\s+[\w'-]+){0,7}\s+(?:is|are|was|were)\s+\S"),
    _rule(Intent.LEARNING, "key_value", r"^[^:?]{2,80}:\s*\S"),
    # Greetings and farewells
    _rule(Intent.GREETING, "hello", r"^(?:hi|hello|hey|howdy|hiya|yo|greetings|hola)\b"),
    _rule(Intent.GREETING, "time_of_day", r"^good\s+(?:morning|afternoon|evening|night|day)\b"),
    _rule(Intent.GREETING, "how_are_you", r"\bhow\s+(?:are|r)\s+(?:you|u)\b|\bhow's it going\b"),
    _rule(Intent.GREETING, "whats_up", r"^(?:what'?s up|sup|wassup)\b"),
    _rule(Intent.GREETING, "farewell", r"^(?:bye|goodbye|see you|see ya|farewell|good night)\b"),
    _rule(Intent.GREETING, "thanks", r"^(?:thanks|thank you|thx|cheers)\b"),
    _rule(Intent.GREETING, "pleasantry", r"\bnice to (?:meet|see) you\b"),
    # Corrections
    _rule(Intent.CORRECTION, "negation_lead", r"^(?:no|nope|nah|wrong|incorrect|false)\b"),
    _rule(Intent.CORRECTION, "you_are_wrong", r"\b(?:that'?s|that is|you'?re|you are|it'?s|it is)\s+(?:wrong|incorrect|not right|not correct|mistaken)\b"),
    _rule(Intent.CORRECTION, "actually", r"^actually\b|\bactually,"),
    _rule(Intent.CORRECTION, "correct_answer", r"\bthe (?:correct|right|real) answer is\b"),
    _rule(Intent.CORRECTION, "should_be", r"\b(?:should|must) (?:be|say)\b"),
    # Questions
    _rule(Intent.QUESTION, "interrogative", INTERROGATIVE_START.pattern),
    _rule(Intent.QUESTION, "auxiliary", AUXILIARY_START.pattern),
    _rule(Intent.QUESTION, "request", r"\b(?:explain|describe|define|tell me about|meaning of)\b"),
    _rule(Intent.QUESTION, "wonder", r"\bi (?:wonder|want to know|need to know)\b"),
)

# Lead-ins stripped from a correction before it is parsed as a teach command
CORRECTION_LEAD_IN = re.compile(
    r"^(?:(?:no|nope|nah|wrong|incorrect|false|actually)\b[\s,.!:;-]*"
    r"|(?:that'?s|that is|you'?re|you are|it'?s|it is)\s+(?:wrong|incorrect|not right|not correct|mistaken)\b[\s,.!:;-]*)+",
    re.IGNORECASE,
)
