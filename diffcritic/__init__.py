"""diffcritic: review pull request hunks with a language model."""

__version__ = "0.1.0"
