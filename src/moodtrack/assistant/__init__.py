"""Context building for the external chat assistant."""

from moodtrack.assistant.context import build_context

__all__ = ["build_context"]
