"""FocusFeed: short educational snippets for an infinite topic feed."""

__version__ = "0.1.0"
