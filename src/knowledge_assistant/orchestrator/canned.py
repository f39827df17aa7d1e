"""Fixed and templated responses: identity, greetings, system info, messages."""

import random
import re
from datetime import datetime

from knowledge_assistant.config import Settings
from knowledge_assistant.intent.teach import TeachCommand

# Closed list of "who made you" phrasings, compared against the normalized query
CREATOR_PHRASES = frozenset(
    {
        "who made you",
        "who created you",
        "who built you",
        "who developed you",
        "who programmed you",
        "who designed you",
        "who wrote you",
        "who is your creator",
        "who is your developer",
        "who are your creators",
        "who are your developers",
        "who is behind you",
        "who is your maker",
        "where do you come from",
        "where were you made",
        "where were you created",
        "where are you from",
    }
)

_SYSTEM_INFO_PATTERNS = (
    re.compile(r"^who\s+are\s+you\b"),
    re.compile(r"^what\s+are\s+you\b"),
    re.compile(r"^what(?:\s+is|'s)\s+your\s+(?:name|purpose|function|goal)\b"),
    re.compile(r"^what\s+can\s+you\s+do\b"),
    re.compile(r"^what\s+do\s+you\s+do\b"),
    re.compile(r"^(?:tell\s+me|talk)\s+about\s+yourself\b"),
    re.compile(r"^how\s+do\s+you\s+work\b"),
    re.compile(r"^what\s+(?:kind|type)\s+of\s+(?:assistant|system|ai|bot)\s+are\s+you\b"),
    re.compile(r"^what\s+are\s+you\s+(?:for|capable\s+of)\b"),
    re.compile(r"^introduce\s+yourself\b"),
)

_GREETING_BY_TIME = (
    (re.compile(r"\bgood\s+morning\b"), "Good morning! How can I help you today?"),
    (re.compile(r"\bgood\s+afternoon\b"), "Good afternoon! What can I do for you?"),
    (re.compile(r"\bgood\s+evening\b"), "Good evening! How can I help?"),
    (re.compile(r"\bgood\s+night\b"), "Good night! Anything I can help with before you go?"),
)
_FAREWELL = re.compile(r"\b(?:bye|goodbye|see\s+you|farewell|take\s+care)\b")
_THANKS = re.compile(r"\b(?:thanks|thank\s+you|cheers)\b")
_HOW_ARE_YOU = re.compile(r"\bhow\s+are\s+you\b|\bhow\s+is\s+it\s+going\b|\bhow'?s\s+it\s+going\b")

GENERIC_GREETINGS = (
    "Hello! How can I help you?",
    "Hi there! What would you like to know?",
    "Hello! I'm here to help. What do you need?",
    "Hey! Ask me anything, or teach me something new.",
)

DEFAULT_MESSAGE = (
    "I don't have an answer for that yet. You can teach me by saying "
    '"remember that <question> is <answer>".'
)
DEFAULT_CONFIDENCE = 0.1

CLARIFICATION_MESSAGE = (
    "I'd like to learn that, but I couldn't tell the question from the answer. "
    'Try "remember that <question> is <answer>" or "when someone asks <question>, say <answer>".'
)
LEARNING_DISABLED_MESSAGE = "Learning is currently turned off, so I can't remember new facts right now."
STORE_UNAVAILABLE_MESSAGE = "I couldn't save that right now. Please try teaching me again in a moment."
EMPTY_QUERY_MESSAGE = "Please type a question or something you'd like me to learn."


def oversized_query_message(limit: int) -> str:
    return f"That message is too long. Please keep it under {limit} characters."


def is_creator_query(normalized_query: str) -> bool:
    """Exact match against the closed list of creator phrasings."""
    return normalized_query in CREATOR_PHRASES


def creator_response(settings: Settings) -> str:
    origin = f"built by {settings.CREATOR_NAME}"
    if settings.CREATOR_LOCATION:
        origin += f" in {settings.CREATOR_LOCATION}"
    return (
        f"I'm {settings.ASSISTANT_NAME}, {origin}. "
        "I answer questions and learn from the people I talk to."
    )


def is_system_info_query(normalized_query: str) -> bool:
    return any(p.match(normalized_query) for p in _SYSTEM_INFO_PATTERNS)


def system_info_response(settings: Settings) -> str:
    return (
        f"I'm {settings.ASSISTANT_NAME}, a virtual assistant that answers questions from what "
        "I've been taught, from web search and, when enabled, from an AI model. "
        "If I don't know something, you can teach me and I'll remember it."
    )


def greeting_response(normalized_query: str, now: datetime | None = None, rng: random.Random | None = None) -> str:
    """Pick a greeting reply: time-of-day, farewell, thanks, or a random hello."""
    for pattern, reply in _GREETING_BY_TIME:
        if pattern.search(normalized_query):
            return reply
    if _FAREWELL.search(normalized_query):
        return "Goodbye! Come back any time."
    if _THANKS.search(normalized_query):
        return "You're welcome! Anything else?"
    if _HOW_ARE_YOU.search(normalized_query):
        return "I'm doing well, thanks for asking! What can I help you with?"

    hour = (now or datetime.now()).hour
    if hour < 5:
        opener = None
    elif hour < 12:
        opener = "Good morning!"
    elif hour < 18:
        opener = "Good afternoon!"
    else:
        opener = "Good evening!"
    reply = (rng or random).choice(GENERIC_GREETINGS)
    if opener and reply.startswith("Hello!"):
        return reply.replace("Hello!", opener, 1)
    return reply


def learned_response(command: TeachCommand, merged: bool) -> str:
    if merged:
        return f'I\'ve updated what I know: "{command.subject}" is now "{command.value}".'
    return f'I\'ve learned that "{command.subject}" is "{command.value}". Thanks for teaching me!'
