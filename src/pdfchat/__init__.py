"""Chat with a single PDF document through retrieval-augmented generation."""

__version__ = "0.1.0"
