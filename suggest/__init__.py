"""Suggestion lifecycle engine: cache, debounce, chunking, parsing, rendering and applying."""

from .models import AcceptOutcome, EditContext, SuggestionContext, SuggestionItem, SuggestionSet, SuggestionState
from .manager import SuggestionManager

__all__ = ["AcceptOutcome", "EditContext", "SuggestionContext", "SuggestionItem", "SuggestionManager", "SuggestionSet", "SuggestionState"]
