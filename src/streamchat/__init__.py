"""Streaming LLM chat backend with blob-store conversation persistence."""

__version__ = "0.1.0"
