"""Documentation generation from codebases and UI descriptions."""

__version__ = "0.1.0"
