"""Intent classification and teach command parsing."""

from knowledge_assistant.intent.classifier import IntentResult, classify, is_question_form
from knowledge_assistant.intent.rules import RULES, Intent, IntentRule
from knowledge_assistant.intent.teach import (
    TeachCommand,
    has_teach_lead_in,
    parse_teach_command,
    strip_correction,
)

__all__ = [
    "Intent",
    "IntentResult",
    "IntentRule",
    "RULES",
    "TeachCommand",
    "classify",
    "has_teach_lead_in",
    "is_question_form",
    "parse_teach_command",
    "strip_correction",
]
