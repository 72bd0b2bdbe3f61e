"""Pipeline orchestration components for the gifpicker generation pipeline."""

from gifpicker.pipeline.orchestrator import GenerationPipeline
from gifpicker.pipeline.quota_gate import QuotaGate

__all__ = [
    "GenerationPipeline",
    "QuotaGate",
]
