"""Multi-agent document authoring workflow."""

__version__ = "0.1.0"
