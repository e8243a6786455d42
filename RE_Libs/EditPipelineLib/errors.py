"""
Error types raised by the edit pipeline.

Classes:
    EditPipelineError: Base class for all pipeline failures
    DecodeError: Input resource is not an acceptable, decodable image
    EncodeError: Serializing the output surface produced no data
    InvalidStateError: Operation attempted without a loaded bitmap
"""


class EditPipelineError(Exception):
    """Base class for edit pipeline errors."""


class DecodeError(EditPipelineError, ValueError):
    """Raised when an input resource cannot be decoded into a bitmap."""


class EncodeError(EditPipelineError, RuntimeError):
    """Raised when the export surface serializes to no data."""


class InvalidStateError(EditPipelineError, RuntimeError):
    """Raised when an operation needs a bitmap that is not loaded."""
