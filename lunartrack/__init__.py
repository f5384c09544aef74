"""Track lunar rockets over HTTP from ordered, deduplicated state-change messages."""

__version__ = "1.0.0"

__all__ = ["__version__"]