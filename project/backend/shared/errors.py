"""
Error hierarchy.

All pipeline errors derive from PipelineError so callers can catch the
whole family in one place.
"""

from typing import Optional


class PipelineError(Exception):
    """Base exception for all compositor errors."""

    def __init__(self, message: str, run_id: Optional[str] = None):
        """
        Initialize error.

        Args:
            message: Human readable error message
            run_id: Optional run identifier for correlation with logs
        """
        super().__init__(message)
        self.message = message
        self.run_id = run_id


class ConfigError(PipelineError):
    """Invalid or missing configuration."""
    pass


class ValidationError(PipelineError):
    """Malformed input detected before any expensive work starts."""
    pass


class TransientExternalError(PipelineError):
    """A single call to an external collaborator failed."""
    pass


class SynthesisError(TransientExternalError):
    """Speech synthesis failed for one scene."""
    pass


class RenderError(TransientExternalError):
    """Visual render failed for one content hash."""
    pass


class IntegrityError(PipelineError):
    """An internal invariant was violated. Indicates a defect, not a runtime condition."""
    pass


class CompositionError(PipelineError):
    """Composition failed."""
    pass


class PipelineFatalError(CompositionError):
    """The encoder stage failed and the run has to be aborted."""
    pass
