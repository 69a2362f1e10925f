"""Generic async pipeline engine: compose steps, split foreground/background.

Public surface::

    from pipeline import (
        Pipeline,
        StepProtocol,
        StepContext,
        SampleResult,
        PipelineOrderError,
        PipelineConfigError,
    )
"""

from .context import StepContext
from .errors import PipelineConfigError, PipelineOrderError
from .pipeline import Pipeline, invoke_step
from .protocol import SampleResult, StepProtocol

__all__ = [
    "Pipeline",
    "StepProtocol",
    "StepContext",
    "SampleResult",
    "PipelineOrderError",
    "PipelineConfigError",
    "invoke_step",
]
