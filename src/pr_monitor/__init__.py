"""Monitor pull requests that involve you on GitHub."""

__version__ = "0.1.0"
