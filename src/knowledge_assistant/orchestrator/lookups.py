"""Built-in lookups: a local programming snippet library and constant facts."""

import re
from dataclasses import dataclass

PROGRAMMING_CONFIDENCE = 0.9
FACTUAL_CONFIDENCE = 0.95


@dataclass(frozen=True)
class LookupAnswer:
    response: str
    source: str
    confidence: float
    context: str | None = None


_CODE_REQUEST = re.compile(
    r"\b(?:code|algorithm|function|program|implement(?:ation)?|script|snippet|write|example)\b"
)
_OTHER_LANGUAGES = re.compile(
    r"\b(?:javascript|typescript|java|c\+\+|c#|php|ruby|swift|kotlin|golang|rust|perl)\b|\bc\b"
)

_SNIPPETS: tuple[tuple[re.Pattern, str, str], ...] = (
    (
        re.compile(r"\bfactorial\b"),
        "Factorial",
        '''def factorial(n):
    if n < 0:
        raise ValueError("factorial is not defined for negative numbers")
    result = 1
    for i in range(2, n + 1):
        result *= i
    return result''',
    ),
    (
        re.compile(r"\bfibonacci\b"),
        "Fibonacci sequence",
        '''def fibonacci(n):
    """Return the first n Fibonacci numbers."""
    a, b = 0, 1
    numbers = []
    for _ in range(n):
        numbers.append(a)
        a, b = b, a + b
    return numbers''',
    ),
    (
        re.compile(r"\bprimes?\b"),
        "Prime check",
        '''def is_prime(n):
    if n < 2:
        return False
    i = 2
    while i * i <= n:
        if n % i == 0:
            return False
        i += 1
    return True''',
    ),
    (
        re.compile(r"\bpalindromes?\b"),
        "Palindrome check",
        '''def is_palindrome(text):
    cleaned = [c.lower() for c in text if c.isalnum()]
    return cleaned == cleaned[::-1]''',
    ),
    (
        re.compile(r"\bbubble\s*sort\b"),
        "Bubble sort",
        '''def bubble_sort(items):
    items = list(items)
    for end in range(len(items) - 1, 0, -1):
        swapped = False
        for i in range(end):
            if items[i] > items[i + 1]:
                items[i], items[i + 1] = items[i + 1], items[i]
                swapped = True
        if not swapped:
            break
    return items''',
    ),
    (
        re.compile(r"\bbinary\s+search\b"),
        "Binary search",
        '''def binary_search(items, target):
    low, high = 0, len(items) - 1
    while low <= high:
        mid = (low + high) // 2
        if items[mid] == target:
            return mid
        if items[mid] < target:
            low = mid + 1
        else:
            high = mid - 1
    return -1''',
    ),
    (
        re.compile(r"\breverse\s+(?:a\s+)?string\b"),
        "String reversal",
        '''def reverse_string(text):
    return text[::-1]''',
    ),
)

_FACTS: tuple[tuple[re.Pattern, str], ...] = (
    (
        re.compile(r"\bspeed\s+of\s+light\b"),
        "The speed of light in a vacuum is 299,792,458 metres per second.",
    ),
    (
        re.compile(r"\bboiling\s+point\s+of\s+water\b"),
        "Water boils at 100 °C (212 °F) at standard atmospheric pressure.",
    ),
    (
        re.compile(r"\bfreezing\s+point\s+of\s+water\b"),
        "Water freezes at 0 °C (32 °F) at standard atmospheric pressure.",
    ),
    (
        re.compile(r"^(?:what\s+is\s+)?(?:the\s+)?(?:value\s+of\s+)?pi$"),
        "Pi (π) is approximately 3.14159265359.",
    ),
    (
        re.compile(r"\bhow\s+many\s+continents\b"),
        "There are seven continents: Africa, Antarctica, Asia, Australia, Europe, "
        "North America and South America.",
    ),
    (
        re.compile(r"\bhow\s+many\s+planets\b"),
        "There are eight planets in the Solar System.",
    ),
    (
        re.compile(r"\bhow\s+many\s+days\s+(?:are\s+)?in\s+a\s+leap\s+year\b"),
        "A leap year has 366 days.",
    ),
    (
        re.compile(r"\bavogadro(?:'s)?\s+(?:number|constant)\b"),
        "Avogadro's constant is 6.02214076 × 10^23 per mole.",
    ),
    (
        re.compile(r"\b(?:acceleration\s+(?:due\s+)?(?:to\s+)?gravity|gravitational\s+acceleration)\b"),
        "The standard acceleration due to gravity on Earth is 9.80665 m/s².",
    ),
)


def programming_lookup(normalized_query: str) -> LookupAnswer | None:
    """Python snippet for a known algorithm request, if any."""
    if not _CODE_REQUEST.search(normalized_query) or _OTHER_LANGUAGES.search(normalized_query):
        return None
    for pattern, title, code in _SNIPPETS:
        if pattern.search(normalized_query):
            return LookupAnswer(
                response=f"Here is a Python implementation ({title.lower()}):\n\n```python\n{code}\n```",
                source="programming",
                confidence=PROGRAMMING_CONFIDENCE,
                context=title,
            )
    return None


def factual_lookup(normalized_query: str) -> LookupAnswer | None:
    """Answer from the built-in table of constants, if any."""
    for pattern, answer in _FACTS:
        if pattern.search(normalized_query):
            return LookupAnswer(
                response=answer,
                source="factual",
                confidence=FACTUAL_CONFIDENCE,
                context="Built-in facts",
            )
    return None
