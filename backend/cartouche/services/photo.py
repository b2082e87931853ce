"""
Photo transformation and upload pipeline.

A ``Photo`` is one run over one source image: it analyzes the original,
derives a local file for every transformation, uploads every derived file
and returns the remote references.

Responsibilities:
- Keep the ordered list of transformations, "original" first
- Track which local file each transformation is bound to
- Run analyze -> derive (all) -> upload (all) strictly in order
- Release the working directory once, whatever the outcome
"""

import threading
import uuid
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union

from cartouche.core.errors import (
    AnalysisError,
    CartoucheError,
    DerivationError,
    ResourceError,
    SaveCancelled,
    UploadError,
)
from cartouche.core.logger import logger
from cartouche.core.storage import VISIBILITY_PUBLIC, StorageManager
from cartouche.core.workdir import WorkingDirectory
from cartouche.models.photo_models import (
    ORIGINAL,
    ImageMetadata,
    SaveResult,
    SpecLike,
    TransformationSpec,
    merge_spec_defaults,
    original_spec,
)
from cartouche.services.image_ops import inspect_image, resize_image

CONTENT_TYPE = "image/jpeg"


class RunStatus(str, Enum):
    CREATED = "created"
    ANALYZING = "analyzing"
    DERIVING = "deriving"
    UPLOADING = "uploading"
    FINALIZING = "finalizing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class RunState:
    """Everything a run accumulates; step functions read and write it explicitly."""
    id: str
    source_path: str
    work_dir: WorkingDirectory
    specs: List[TransformationSpec] = field(default_factory=list)
    local_paths: Dict[str, str] = field(default_factory=dict)
    metadata: Optional[ImageMetadata] = None
    remote_urls: Dict[str, str] = field(default_factory=dict)
    status: RunStatus = RunStatus.CREATED

    @property
    def original_path(self) -> str:
        """Local file currently bound to the original transformation."""
        return self.local_paths[ORIGINAL]


def file_name(state: RunState, spec: TransformationSpec) -> str:
    return f"{state.id}_{spec.name}.jpg"


def local_path_for(state: RunState, spec: TransformationSpec) -> str:
    """Target of a derivation: ``<work_dir>/<id>_<name>.jpg``."""
    return state.work_dir.join(file_name(state, spec))


def remote_key_for(state: RunState, spec: TransformationSpec) -> str:
    """Destination of an upload: ``/<id>_<name>.jpg``."""
    return "/" + file_name(state, spec)


def analyze(state: RunState) -> ImageMetadata:
    """
    Inspect the file bound to "original".

    Reads ``local_paths["original"]``, writes ``metadata``.

    Raises:
        AnalysisError: If the file is unreadable or not an image
    """
    path = state.original_path
    try:
        metadata = inspect_image(path)
    except Exception as e:
        logger.error(f"Analysis failed for {path}: {str(e)}")
        raise AnalysisError(path, str(e)) from e

    state.metadata = metadata
    logger.info(f"Photo {state.id}: analyzed {path} ({metadata.width}x{metadata.height})")
    return metadata


def derive(state: RunState, spec: TransformationSpec):
    """
    Produce the local file of one transformation.

    Reads ``local_paths[spec.name]`` (or the original's path when unbound),
    writes ``local_paths[spec.name]``.

    Raises:
        DerivationError: If resizing fails
    """
    if spec.resize is None:
        # Pass-through shares the original's current file
        state.local_paths.setdefault(spec.name, state.original_path)
        return

    # A transformation already bound to a file is derived again from that file
    source = state.local_paths.get(spec.name, state.original_path)

    try:
        target = local_path_for(state, spec)
        resize_image(source, spec.resize.width, spec.resize.height, target)
    except Exception as e:
        logger.error(f"Photo {state.id}: derivation of '{spec.name}' failed: {str(e)}")
        raise DerivationError(spec.name, str(e)) from e

    state.local_paths[spec.name] = target
    logger.info(
        f"Photo {state.id}: derived '{spec.name}' "
        f"({spec.resize.width}x{spec.resize.height}) -> {target}"
    )


def upload_one(state: RunState, spec: TransformationSpec, storage: StorageManager):
    """
    Upload the local file of one transformation.

    Reads ``local_paths[spec.name]``, writes ``remote_urls[spec.name]``.

    Raises:
        UploadError: If the transformation has no local file or the upload fails
    """
    local_path = state.local_paths.get(spec.name)
    if local_path is None:
        raise UploadError(spec.name, "no local file was derived")

    remote_key = remote_key_for(state, spec)
    try:
        url = storage.upload(local_path, remote_key, CONTENT_TYPE, VISIBILITY_PUBLIC)
    except Exception as e:
        logger.error(f"Photo {state.id}: upload of '{spec.name}' failed: {str(e)}")
        raise UploadError(spec.name, str(e)) from e

    state.remote_urls[spec.name] = url


Step = Tuple[RunStatus, str, Callable[[], object]]


class Photo:
    """
    One source image, its transformations and their uploads.

    Usage:
        photo = Photo(storage, "cat.png", transformations=[
            {"name": "thumb", "resize": {"width": 100, "height": 100}},
        ])
        result = photo.save()
        result.urls["thumb"]
    """

    def __init__(
        self,
        storage: StorageManager,
        path: Union[str, Path],
        options: Optional[SpecLike] = None,
        transformations: Optional[List[SpecLike]] = None
    ):
        """
        Args:
            storage: Uploader shared between runs
            path: Source image
            options: Defaults applied to every transformation; they also
                describe the "original" transformation itself
            transformations: Additional named transformations, in execution order

        Raises:
            ResourceError: If the working directory cannot be created
            ValueError: If a transformation name is reserved or repeated
        """
        self.storage = storage
        self.options = options or {}
        self.current_step: Optional[str] = None

        original = original_spec(self.options)
        photo_id = str(uuid.uuid1())
        self.state = RunState(
            id=photo_id,
            source_path=str(path),
            work_dir=WorkingDirectory(prefix=f"cartouche_{photo_id}_"),
            specs=[original],
        )
        self.state.local_paths[ORIGINAL] = self.state.source_path

        try:
            for transformation in transformations or []:
                self.add_spec(transformation)
        except Exception:
            self.state.work_dir.release()
            raise

    @property
    def id(self) -> str:
        return self.state.id

    @property
    def status(self) -> RunStatus:
        return self.state.status

    @property
    def specs(self) -> List[TransformationSpec]:
        return list(self.state.specs)

    def add_spec(self, spec: SpecLike) -> TransformationSpec:
        """Append a transformation, filling its unset fields from the options."""
        if self.state.status is not RunStatus.CREATED:
            raise RuntimeError(f"Photo {self.id} is already saved")

        merged = merge_spec_defaults(spec, self.options)
        if merged.is_original:
            raise ValueError(f"'{ORIGINAL}' is reserved for the source image")
        if any(s.name == merged.name for s in self.state.specs):
            raise ValueError(f"Duplicate transformation name '{merged.name}'")

        self.state.specs.append(merged)
        return merged

    def _derive_step(self, spec: TransformationSpec):
        derive(self.state, spec)
        if spec.is_original and self.state.original_path != self.state.source_path:
            # The original itself was transformed; report what gets uploaded
            analyze(self.state)

    def _plan(self) -> List[Step]:
        """Ordered steps of a save: analyze, every derivation, every upload."""
        steps: List[Step] = [(RunStatus.ANALYZING, "analyze", partial(analyze, self.state))]
        for spec in self.state.specs:
            steps.append((RunStatus.DERIVING, f"derive:{spec.name}", partial(self._derive_step, spec)))
        for spec in self.state.specs:
            steps.append((
                RunStatus.UPLOADING,
                f"upload:{spec.name}",
                partial(upload_one, self.state, spec, self.storage),
            ))
        return steps

    def _finalize(self, succeeded: bool):
        self.state.status = RunStatus.FINALIZING
        self.current_step = "finalize"
        try:
            self.state.work_dir.release()
        except ResourceError as e:
            logger.warning(f"Photo {self.id}: {str(e)}")

        if succeeded:
            self.state.status = RunStatus.COMPLETED
        else:
            # No URL of a failed run is valid
            self.state.remote_urls.clear()
            self.state.status = RunStatus.FAILED

    def save(self, cancel_event: Optional[threading.Event] = None) -> SaveResult:
        """
        Perform all transformations and upload them.

        Args:
            cancel_event: Checked between steps; when set the run stops
                and ``SaveCancelled`` is raised

        Returns:
            SaveResult with the original's metadata and one URL per transformation

        Raises:
            AnalysisError, DerivationError, UploadError, SaveCancelled
            RuntimeError: If the photo was already saved
        """
        if self.state.status is not RunStatus.CREATED:
            raise RuntimeError(f"Photo {self.id} is already saved")

        logger.info(f"Photo {self.id}: saving {len(self.state.specs)} transformation(s)")
        succeeded = False
        try:
            for status, label, step in self._plan():
                if cancel_event is not None and cancel_event.is_set():
                    raise SaveCancelled(f"Photo {self.id} cancelled before {label}")
                self.state.status = status
                self.current_step = label
                step()
            succeeded = True
        except CartoucheError as e:
            logger.error(f"Photo {self.id} failed at {self.current_step}: {str(e)}")
            raise
        finally:
            self._finalize(succeeded)

        logger.info(f"✅ Photo {self.id} saved")
        return SaveResult(
            photo_id=self.id,
            metadata=self.state.metadata,
            urls=dict(self.state.remote_urls),
        )


def create_photo_factory(storage: Optional[StorageManager] = None) -> Callable[..., Photo]:
    """
    Bind one storage client to a photo constructor.

    Returns:
        factory(path, options=None, transformations=None) -> Photo
    """
    storage = storage or StorageManager()

    def factory(
        path: Union[str, Path],
        options: Optional[SpecLike] = None,
        transformations: Optional[List[SpecLike]] = None
    ) -> Photo:
        return Photo(storage, path, options, transformations)

    return factory
