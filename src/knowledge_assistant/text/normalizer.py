"""Deterministic query normalization.

normalize() is total and idempotent: it never raises, always returns a string,
and normalizing an already normalized string returns it unchanged.
"""

import re

DEFAULT_MAX_LENGTH = 500

# Confusable / accented characters folded to their ASCII base letter
_CONFUSABLES = {
    "a": "áâàäãåăąāÁÂÀÄÃÅĂĄĀ",
    "ae": "æÆ",
    "e": "éêèëęėēěÉÊÈËĘĖĒĚ",
    "i": "íîìïĩīįÍÎÌÏĨĪĮ",
    "o": "óôòöõōŏőøÓÔÒÖÕŌŎŐØ",
    "oe": "œŒ",
    "u": "úûùüũūŭůÚÛÙÜŨŪŬŮ",
    "n": "ñÑ",
    "c": "çÇ",
    "ss": "ß",
    "": "¿¡�",
}

_TRANSLATION = str.maketrans(
    {char: replacement for replacement, chars in _CONFUSABLES.items() for char in chars}
)

# Filler lead-ins removed from the front of a query, longest first
FILLER_PREFIXES = (
    "i would like to know",
    "i'd like to know",
    "could you tell me",
    "can you tell me",
    "please tell me",
    "i want to know",
    "i need to know",
    "do you know",
    "tell me",
)

_REPEATED_PUNCT = re.compile(r"([.!?])[.!?]+")
_BOUNDARY = re.compile(r"^[\W_]+|[\W_]+$")
_GLUED_WORDS = re.compile(r"(?<=[a-z])[.,:;!?](?=[a-z])")
_WHITESPACE = re.compile(r"\s+")
_FILLER = re.compile(
    r"^(?:" + "|".join(re.escape(p) for p in FILLER_PREFIXES) + r")\s+"
)


def fold_accents(text: str) -> str:
    """Replace accented and confusable characters with their base letters."""
    return text.translate(_TRANSLATION)


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def _normalize_once(text: str, max_length: int) -> str:
    text = fold_accents(text).lower().strip()
    text = _REPEATED_PUNCT.sub(r"\1", text)
    text = _BOUNDARY.sub("", text)
    text = _GLUED_WORDS.sub(" ", text)
    text = collapse_whitespace(text)
    while _FILLER.match(text):
        text = _FILLER.sub("", text, count=1)
    text = _BOUNDARY.sub("", text)
    if len(text) > max_length:
        text = text[:max_length]
    return text.strip()


def normalize(raw: object, max_length: int = DEFAULT_MAX_LENGTH) -> str:
    """Normalize a raw query into its matching key.

    Args:
        raw: User input. Anything that is not a string normalizes to "".
        max_length: Maximum length of the result.

    Returns:
        Normalized query, possibly empty.
    """
    if not isinstance(raw, str):
        return ""

    text = raw
    # After the first pass no rewrite grows the text, so this reaches a fixed point.
    while True:
        normalized = _normalize_once(text, max_length)
        if normalized == text:
            return text
        text = normalized


def tokenize(text: str) -> list[str]:
    """Split normalized text into word tokens."""
    return [t for t in re.split(r"[^\w']+", text) if t]
