"""Runners — compose the learning pipeline for callers."""

from .learning import LearningResult, LearningRunner

__all__ = ["LearningResult", "LearningRunner"]
