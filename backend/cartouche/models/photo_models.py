"""
Pydantic models for photo transformations and run results.

Responsibilities:
- Define the recognized transformation fields
- Merge pipeline-wide default options into each transformation
- Describe image metadata and the result of a save
"""

from typing import Any, Dict, Mapping, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

ORIGINAL = "original"


class ResizeSpec(BaseModel):
    """Bounding box for a resize; the image is scaled to fit inside it."""
    model_config = ConfigDict(extra="forbid")

    width: int = Field(..., gt=0, description="Maximum width in pixels")
    height: int = Field(..., gt=0, description="Maximum height in pixels")


class TransformationSpec(BaseModel):
    """A named request for one derived image."""
    model_config = ConfigDict(extra="forbid")

    name: str = Field(
        ...,
        pattern=r"^[A-Za-z0-9][A-Za-z0-9_-]*$",
        description="Identifier, unique within a run; also used in file names"
    )
    resize: Optional[ResizeSpec] = Field(None, description="Resize directive, absent for pass-through")

    @property
    def is_original(self) -> bool:
        return self.name == ORIGINAL


SpecLike = Union[TransformationSpec, Mapping[str, Any]]


def _fields(value: Optional[SpecLike]) -> Dict[str, Any]:
    """Fields explicitly given by the caller."""
    if value is None:
        return {}
    if isinstance(value, BaseModel):
        return value.model_dump(exclude_unset=True)
    return dict(value)


def merge_spec_defaults(spec: SpecLike, defaults: Optional[SpecLike] = None) -> TransformationSpec:
    """
    Fill the unset fields of a transformation from pipeline-wide defaults.

    Fields set on the spec always win, including an explicit ``resize=None``.
    The defaults never provide a name.

    Raises:
        pydantic.ValidationError: If the merged fields are invalid
    """
    merged = {k: v for k, v in _fields(defaults).items() if k != "name"}
    merged.update(_fields(spec))
    return TransformationSpec.model_validate(merged)


def original_spec(options: Optional[SpecLike] = None) -> TransformationSpec:
    """Build the implicit pass-through (or resized) original transformation."""
    fields = _fields(options)
    fields["name"] = ORIGINAL
    return TransformationSpec.model_validate(fields)


class ImageMetadata(BaseModel):
    """Properties of an analyzed image."""
    width: int = Field(..., description="Width in pixels")
    height: int = Field(..., description="Height in pixels")
    format: Optional[str] = Field(None, description="Decoder format, e.g. JPEG or PNG")


class SaveResult(BaseModel):
    """Outcome of a successful save."""
    photo_id: str = Field(..., description="Unique id of the run")
    metadata: ImageMetadata = Field(..., description="Metadata of the (possibly resized) original")
    urls: Dict[str, str] = Field(..., description="Remote reference per transformation name")
