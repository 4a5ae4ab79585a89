"""cc-brain: tiered persistent memory for coding-assistant sessions."""

__version__ = "0.1.0"
