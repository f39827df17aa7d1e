"""Knowledge Assistant - self-learning question answering with staged fallbacks."""

__version__ = "0.1.0"
