"""Watch Market - luxury-watch market reports from live listings and an LLM."""

__version__ = "0.1.0"
