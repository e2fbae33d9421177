"""trimwire - context pruning for LLM request bodies."""

__version__ = "0.1.0"
__logo__ = "✂"
