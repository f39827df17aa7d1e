"""Text normalization helpers."""

from knowledge_assistant.text.normalizer import (
    collapse_whitespace,
    fold_accents,
    normalize,
    tokenize,
)

__all__ = ["collapse_whitespace", "fold_accents", "normalize", "tokenize"]
