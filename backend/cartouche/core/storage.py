"""
Supabase Storage helper for photo uploads.

Every derived image of a run lands in one bucket (``CARTOUCHE_BUCKET``).
Remote keys are written ``/<photo_id>_<name>.jpg``; the leading slash is
dropped to form the path inside the bucket.

Visibility:
- public-read: the public URL of the object is returned
- private: a signed URL valid for ``CARTOUCHE_SIGNED_URL_TTL`` seconds is returned
"""

from pathlib import Path
from typing import Optional, Union
from supabase import Client
from cartouche.core.config import settings
from cartouche.core.supabase_client import get_supabase
from cartouche.core.logger import logger

VISIBILITY_PUBLIC = "public-read"
VISIBILITY_PRIVATE = "private"


class StorageManager:
    """Handles file uploads to a Supabase Storage bucket."""

    def __init__(self, bucket: Optional[str] = None, client: Optional[Client] = None):
        self.bucket = bucket or settings.BUCKET
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_supabase()
        return self._client

    @staticmethod
    def bucket_path(remote_key: str) -> str:
        """Convert a remote key into a path within the bucket."""
        return remote_key.lstrip("/")

    def _get_url(self, file_path: str, visibility: str) -> str:
        """
        Get the URL for a stored file.

        Args:
            file_path: File path within bucket
            visibility: public-read or private

        Returns:
            URL to access the file
        """
        bucket = self.client.storage.from_(self.bucket)
        if visibility == VISIBILITY_PUBLIC:
            return bucket.get_public_url(file_path)

        response = bucket.create_signed_url(file_path, settings.SIGNED_URL_TTL)
        # storage3 has returned both spellings across releases
        return response.get("signedURL") or response.get("signedUrl")

    def upload(
        self,
        local_path: Union[str, Path],
        remote_key: str,
        content_type: str = "application/octet-stream",
        visibility: str = VISIBILITY_PUBLIC
    ) -> str:
        """
        Upload a local file to Supabase Storage.

        Args:
            local_path: Path of the file to send
            remote_key: Destination key, e.g. ``/<photo_id>_thumb.jpg``
            content_type: MIME type of the file
            visibility: public-read or private

        Returns:
            URL of the uploaded file

        Raises:
            ValueError: If visibility is unknown
            Exception: If reading or uploading fails
        """
        if visibility not in (VISIBILITY_PUBLIC, VISIBILITY_PRIVATE):
            raise ValueError(f"Unknown visibility: {visibility}")

        file_path = self.bucket_path(remote_key)

        try:
            with open(local_path, "rb") as f:
                data = f.read()

            self.client.storage.from_(self.bucket).upload(
                path=file_path,
                file=data,
                file_options={"content-type": content_type, "upsert": "true"}
            )

            url = self._get_url(file_path, visibility)
            logger.info(f"Uploaded file to {self.bucket}/{file_path}")

            return url

        except Exception as e:
            logger.error(f"Failed to upload file to {self.bucket}/{file_path}: {str(e)}")
            raise
