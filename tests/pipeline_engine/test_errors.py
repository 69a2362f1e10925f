"""Unit tests for pipeline error types."""

from __future__ import annotations

import pytest

from pipeline import Pipeline, PipelineConfigError, PipelineOrderError
from tests.pipeline_engine.conftest import BoundaryStep, SetA, SetB


@pytest.mark.unit
class TestPipelineErrors:
    def test_order_error_names_missing_field(self):
        with pytest.raises(PipelineOrderError) as exc_info:
            Pipeline([SetB(), SetA()])
        assert "a" in str(exc_info.value)
        assert "SetB" in str(exc_info.value)

    def test_config_error_names_duplicate_boundary(self):
        with pytest.raises(PipelineConfigError, match="BoundaryStep"):
            Pipeline([BoundaryStep(), BoundaryStep()])

    def test_errors_are_plain_exceptions(self):
        assert issubclass(PipelineOrderError, Exception)
        assert issubclass(PipelineConfigError, Exception)
        assert not issubclass(PipelineOrderError, PipelineConfigError)
