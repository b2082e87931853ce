"""
Exception hierarchy for photo runs.

Every failure surfaced by ``Photo.save`` is a ``CartoucheError``. Errors
raised by a single transformation carry the name of that transformation.
"""

from typing import Optional


class CartoucheError(Exception):
    """Base class for all pipeline failures."""


class ResourceError(CartoucheError):
    """The working directory could not be allocated or released."""


class AnalysisError(CartoucheError):
    """The image bound to the original transformation could not be inspected."""

    def __init__(self, path: str, reason: Optional[str] = None):
        self.path = path
        self.reason = reason
        message = f"Cannot analyze image {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class TransformationError(CartoucheError):
    """A failure tied to one named transformation."""

    action = "process"

    def __init__(self, spec_name: str, reason: Optional[str] = None):
        self.spec_name = spec_name
        self.reason = reason
        message = f"Failed to {self.action} transformation '{spec_name}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class DerivationError(TransformationError):
    action = "derive"


class UploadError(TransformationError):
    action = "upload"


class SaveCancelled(CartoucheError):
    """The run was cancelled between two steps."""
