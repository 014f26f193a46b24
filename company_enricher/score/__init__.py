"""Candidate scoring for article resolution."""

from .matcher import MatchScorer

__all__ = ["MatchScorer"]
