"""Pipeline error types."""

from __future__ import annotations


class PipelineOrderError(Exception):
    """A step requires a field that only a later step provides."""


class PipelineConfigError(Exception):
    """Invalid pipeline wiring.

    Examples:
    - More than one ``async_boundary = True`` step in the same pipeline.
    - An ``async_boundary = True`` step inside a nested pipeline.
    """
