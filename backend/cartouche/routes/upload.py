"""
Handles photo upload and transformation.

Responsibilities:
- Accept an image file with optional options and transformations (JSON)
- Stage the file locally and run a Photo save off the event loop
- Map pipeline failures to HTTP errors
"""

import json
import os
import tempfile
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool

from cartouche.core.errors import AnalysisError, CartoucheError, UploadError
from cartouche.core.logger import logger
from cartouche.core.storage import StorageManager
from cartouche.models.photo_models import SaveResult
from cartouche.services.photo import Photo

router = APIRouter(prefix="/photos", tags=["Photos"])

_storage: Optional[StorageManager] = None


def get_storage() -> StorageManager:
    """Shared storage manager; overridden in tests."""
    global _storage
    if _storage is None:
        _storage = StorageManager()
    return _storage


def _stage(data: bytes, suffix: str) -> str:
    """Write the uploaded bytes to a temp file and return its path."""
    with tempfile.NamedTemporaryFile(suffix=suffix, delete=False) as staged:
        staged.write(data)
        return staged.name


def _parse_json(field: str, raw: Optional[str]):
    if not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise HTTPException(status_code=400, detail=f"Invalid JSON in '{field}': {e.msg}")


@router.post("/", response_model=SaveResult)
async def upload_photo(
    file: UploadFile = File(...),
    options: Optional[str] = Form(None),
    transformations: Optional[str] = Form(None),
    storage: StorageManager = Depends(get_storage),
):
    """
    Uploads an image, derives every requested transformation and stores them.
    """
    parsed_options = _parse_json("options", options)
    parsed_transformations = _parse_json("transformations", transformations)
    if parsed_options is not None and not isinstance(parsed_options, dict):
        raise HTTPException(status_code=400, detail="'options' must be a JSON object")
    if parsed_transformations is not None and not isinstance(parsed_transformations, list):
        raise HTTPException(status_code=400, detail="'transformations' must be a JSON list")

    # File I/O stays off the event loop
    data = await file.read()
    suffix = os.path.splitext(file.filename or "")[1]
    staged_path = await run_in_threadpool(_stage, data, suffix)

    try:
        try:
            photo = await run_in_threadpool(
                Photo, storage, staged_path, parsed_options, parsed_transformations
            )
        except (TypeError, ValueError) as e:
            raise HTTPException(status_code=400, detail=str(e))

        logger.info(f"Received {file.filename} as photo {photo.id}")
        return await run_in_threadpool(photo.save)

    except AnalysisError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except UploadError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except CartoucheError as e:
        raise HTTPException(status_code=500, detail=str(e))
    finally:
        await run_in_threadpool(os.unlink, staged_path)
