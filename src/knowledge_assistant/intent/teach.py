"""Teach command parsing.

Extracts the question and the answer from statements such as
"remember that the capital of France is Paris", "API means application
programming interface", "when someone asks about the office wifi, say guest123"
or plain declarative facts like "Paris is the capital of France".
"""

import re
from dataclasses import dataclass

from knowledge_assistant.intent.rules import CORRECTION_LEAD_IN, INTERROGATIVE_START
from knowledge_assistant.text.normalizer import collapse_whitespace


@dataclass(frozen=True)
class TeachCommand:
    """A parsed teach command.

    question is the text the answer is stored under; subject and value are the
    two halves of the fact, used in the confirmation message.
    """

    question: str
    answer: str
    subject: str
    value: str
    explicit: bool
    form: str


@dataclass(frozen=True)
class _TeachPattern:
    form: str
    pattern: re.Pattern
    explicit: bool = True
    whole_statement: bool = False


def _p(form: str, pattern: str, explicit: bool = True, whole_statement: bool = False) -> _TeachPattern:
    return _TeachPattern(form, re.compile(pattern, re.IGNORECASE), explicit, whole_statement)


_LEARN_VERB = r"(?:please\s+)?(?:learn|remember|memori[sz]e)"

TEACH_PATTERNS: tuple[_TeachPattern, ...] = (
    _p(
        "learn_that",
        _LEARN_VERB + r"\s+(?:that\s+)?(?P<q>.+?)\s+(?:is|are|means|equals)\s+(?P<a>.+)",
    ),
    _p(
        "learn_pair",
        _LEARN_VERB + r"\s*:?\s*(?P<q>.+?)\s*(?:=|->|:)\s*(?P<a>.+)",
    ),
    _p(
        "teach",
        r"(?:let me\s+)?teach(?:\s+you)?(?:\s+that)?\s+(?P<q>.+?)\s+(?:is|are|means|as)\s+(?P<a>.+)",
    ),
    _p(
        "when_asked",
        r"(?:when|if)\s+(?:someone|somebody|anyone|anybody|people|i|they)\s+asks?\s+(?:you\s+)?"
        r"(?:about\s+)?(?P<q>.+?),?\s+(?:say|answer|respond|reply|tell them)(?:\s+with)?(?:\s+that)?\s+(?P<a>.+)",
    ),
    _p(
        "answer_is",
        r"the\s+(?:answer|definition|meaning)\s+(?:to|of|for)\s+(?P<q>.+?)\s+is\s+(?P<a>.+)",
    ),
    _p(
        "definition",
        r"(?P<q>.+?)\s+(?:means|stands for|refers to|is defined as)\s+(?P<a>.+)",
    ),
    _p(
        "key_value",
        r"(?P<q>[^:?]{2,80}):\s*(?P<a>.+)",
    ),
    _p(
        "statement",
        r"(?P<q>[\w'-]+(?:\s+[\w'-]+){0,7}?)\s+(?:is|are|was|were)\s+(?P<a>.+)",
        explicit=False,
        whole_statement=True,
    ),
)

TEACH_LEAD_IN = re.compile(
    r"^(?:" + _LEARN_VERB + r"|(?:let me\s+)?teach)\b", re.IGNORECASE
)

# Subjects that make "X is Y" a remark about the conversation, not a fact
_PRONOUN_SUBJECTS = frozenset({"it", "this", "that", "there", "he", "she", "they", "i", "you", "we"})


def clean_statement(text: str) -> str:
    """Collapse whitespace and trim surrounding quotes and terminal punctuation."""
    text = collapse_whitespace(text.replace("¿", "").replace("¡", ""))
    return text.strip(" \"'`.!;")


def _clean_part(text: str) -> str:
    return text.strip().strip("\"'`").strip(" ,.;:!").strip()


def has_teach_lead_in(text: str) -> bool:
    """Text opens with an explicit learn / remember / teach command."""
    return bool(TEACH_LEAD_IN.match(clean_statement(text)))


def strip_correction(text: str) -> str:
    """Remove correction lead-ins such as "no, that's wrong," from the front."""
    return CORRECTION_LEAD_IN.sub("", clean_statement(text)).strip()


def _as_sentence(text: str) -> str:
    text = text[0].upper() + text[1:]
    if text[-1] not in ".!?":
        text += "."
    return text


def parse_teach_command(text: str) -> TeachCommand | None:
    """Extract a question/answer pair from a teach command.

    Args:
        text: Raw user input (case is kept for the stored answer)

    Returns:
        Parsed command, or None if no question and answer can be extracted
    """
    if not isinstance(text, str):
        return None
    statement = clean_statement(text)
    if not statement or statement.endswith("?"):
        return None

    for teach_pattern in TEACH_PATTERNS:
        match = teach_pattern.pattern.fullmatch(statement)
        if not match:
            continue
        subject = _clean_part(match.group("q"))
        value = _clean_part(match.group("a"))
        if not subject or not value or value.endswith("?"):
            continue
        if INTERROGATIVE_START.match(subject.lower()):
            continue

        if teach_pattern.whole_statement:
            if subject.lower() in _PRONOUN_SUBJECTS:
                continue
            return TeachCommand(
                question=statement,
                answer=_as_sentence(statement),
                subject=subject,
                value=value,
                explicit=teach_pattern.explicit,
                form=teach_pattern.form,
            )
        return TeachCommand(
            question=subject,
            answer=value,
            subject=subject,
            value=value,
            explicit=teach_pattern.explicit,
            form=teach_pattern.form,
        )
    return None
