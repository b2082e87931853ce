"""
Cartouche
=========

Resize a photo into named variants and store every variant in
Supabase Storage.

Usage:
    from cartouche import create_photo_factory

    new_photo = create_photo_factory()
    photo = new_photo("cat.png", transformations=[
        {"name": "thumb", "resize": {"width": 100, "height": 100}},
    ])
    result = photo.save()
"""

__version__ = "0.1.0"

from cartouche.core.errors import (
    AnalysisError,
    CartoucheError,
    DerivationError,
    ResourceError,
    SaveCancelled,
    UploadError,
)
from cartouche.core.storage import StorageManager
from cartouche.models.photo_models import ImageMetadata, SaveResult, TransformationSpec
from cartouche.services.photo import Photo, RunStatus, create_photo_factory

__all__ = [
    "AnalysisError",
    "CartoucheError",
    "DerivationError",
    "ImageMetadata",
    "Photo",
    "ResourceError",
    "RunStatus",
    "SaveCancelled",
    "SaveResult",
    "StorageManager",
    "TransformationSpec",
    "UploadError",
    "create_photo_factory",
]
