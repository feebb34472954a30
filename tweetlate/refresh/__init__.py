"""Refresh orchestration: staleness gate, pipeline and cache reader."""

from .gate import GateDecision, StalenessGate, is_stale
from .pipeline import RefreshOutcome, RefreshPipeline
from .reader import get_cached_texts, get_cached_tweets

__all__ = [
    "GateDecision",
    "StalenessGate",
    "is_stale",
    "RefreshOutcome",
    "RefreshPipeline",
    "get_cached_texts",
    "get_cached_tweets",
]
