"""Prompt shaping and answer post-processing for generative providers."""

import re
from datetime import date

SYSTEM_PROMPT = (
    "You are a virtual assistant that gives precise, factual and up-to-date information.\n"
    "Answer briefly and concisely, staying directly on the question asked.\n"
    "Only state verifiable, objective information.\n"
    "If you do not know the answer, say clearly that you do not have enough information.\n"
    "Do not invent information or give personal opinions."
)

# (pattern, instruction prefix, system prompt addition), first match wins
_QUESTION_TYPES: tuple[tuple[re.Pattern, str, str], ...] = (
    (
        re.compile(r"^what\s+(?:is|are|does\s+\S+\s+mean)\b|^define\b|\bmeaning of\b"),
        "Briefly and precisely define: ",
        "You are answering a definition question. Define the concept clearly and concisely.",
    ),
    (
        re.compile(r"^who\s+(?:is|was|were)\b"),
        "Give brief, accurate information about this person: ",
        "You are answering a question about a person. Give the key facts: who they are or "
        "were, what they are known for and relevant dates.",
    ),
    (
        re.compile(r"^where\s+(?:is|are)\b"),
        "Briefly describe the location of: ",
        "You are answering a question about a location. Give precise, concise geographic information.",
    ),
    (
        re.compile(r"^when\s+(?:is|was|did)\b"),
        "State the exact date or period of: ",
        "You are answering a question about a date. Give the date or period only.",
    ),
    (
        re.compile(r"^how\s+(?:many|much)\b"),
        "Give the exact numeric value for: ",
        "You are answering a quantity question. Give the number with its unit.",
    ),
)

_DIRECT_FACT = re.compile(r"\b(?:capital|president|population|currency)\s+of\b")

_AI_QUERY_PATTERNS = (
    re.compile(r"^(?:who|what|which|where|when|why|how)\b"),
    re.compile(r"\b(?:capital|president|currency|history|population|language|meaning|definition)\s+of\b"),
    re.compile(r"\b(?:country|countries|city|cities|continent|region|state|province)\b"),
    re.compile(r"\b(?:book|books|author|authors|film|films|movie|movies)\b"),
    re.compile(r"\b(?:discovery|invention|inventor|theory|scientist)\b"),
    re.compile(r"\b(?:explain|describe|compare|summari[sz]e)\b"),
)

_LEAD_IN_FILLER = re.compile(
    r"^(?:i'?m sorry,? but |according to my knowledge,? |based on (?:the )?available information,? "
    r"|i can tell you that |i should point out that |as an assistant,? i can tell you that "
    r"|the answer is(?: that)? )",
    re.IGNORECASE,
)
_HEDGES = re.compile(r"\b(?:i think|i believe|it seems to me) (?:that )?", re.IGNORECASE)
_TRAILING_HEDGE = re.compile(r",? (?:if i'?m not mistaken|if i remember correctly)\.?$", re.IGNORECASE)
_BULLET = re.compile(r"^[-*•]\s+", re.MULTILINE)


def build_prompt(query: str) -> str:
    """Prefix the query with an instruction suited to its question type."""
    for pattern, prefix, _ in _QUESTION_TYPES:
        if pattern.search(query):
            return prefix + query
    return "Answer this question concisely and directly: " + query


def build_system_prompt(query: str) -> str:
    """System prompt, specialised for the question type."""
    for pattern, _, addition in _QUESTION_TYPES:
        if pattern.search(query):
            return f"{SYSTEM_PROMPT}\n{addition}"
    if _DIRECT_FACT.search(query):
        return (
            f"{SYSTEM_PROMPT}\nYou are answering a direct factual question. "
            "Give only the specific information requested."
        )
    return SYSTEM_PROMPT


def is_ai_query(query: str) -> bool:
    """Whether a normalized query is a good fit for a generative provider."""
    return any(p.search(query) for p in _AI_QUERY_PATTERNS)


def post_process_answer(answer: str) -> str:
    """Strip filler and hedges, capitalise and terminate the answer."""
    text = (answer or "").strip()
    if not text:
        return ""
    text = _LEAD_IN_FILLER.sub("", text)
    if len(text.splitlines()) <= 3:
        text = _BULLET.sub("", text)
    if "not sure" not in text.lower() and "might be" not in text.lower():
        text = _HEDGES.sub("", text, count=1)
        text = _TRAILING_HEDGE.sub(".", text)
    text = text.strip()
    if not text:
        return ""
    text = text[0].upper() + text[1:]
    if text[-1] not in ".!?":
        text += "."
    return text


_STALE_PHRASES = re.compile(
    r"\b(?:current(?:ly)?|recent(?:ly)?|latest|nowadays|as of now|at present|presently|"
    r"this year|incumbent|the current president|right now)\b",
    re.IGNORECASE,
)
_DATED_REFERENCE = re.compile(
    r"\b(?:as of|until|up to|according to (?:data )?(?:from|of))\s+((?:19|20)\d{2})\b",
    re.IGNORECASE,
)


def is_potentially_outdated(answer: str, today: date | None = None) -> bool:
    """Heuristic: the answer refers to "current" facts or to a past year."""
    if not answer:
        return False
    if _STALE_PHRASES.search(answer):
        return True
    current_year = (today or date.today()).year
    return any(int(year) < current_year for year in _DATED_REFERENCE.findall(answer))
