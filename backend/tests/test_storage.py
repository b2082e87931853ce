"""
Tests for the Supabase storage manager, with the Supabase client mocked.
"""

import threading
import time
from unittest.mock import MagicMock

import pytest

from cartouche.core import supabase_client
from cartouche.core.config import Settings
from cartouche.core.storage import StorageManager


@pytest.fixture
def client():
    client = MagicMock()
    bucket = client.storage.from_.return_value
    bucket.get_public_url.return_value = "https://example.supabase.co/public/photos/abc_thumb.jpg"
    bucket.create_signed_url.return_value = {"signedURL": "https://example.supabase.co/sign/abc_thumb.jpg?token=t"}
    return client


@pytest.fixture
def local_file(tmp_path):
    path = tmp_path / "abc_thumb.jpg"
    path.write_bytes(b"\xff\xd8jpeg-bytes")
    return str(path)


class TestStorageManager:

    def test_public_upload(self, client, local_file):
        storage = StorageManager(bucket="photos", client=client)
        url = storage.upload(local_file, "/abc_thumb.jpg", "image/jpeg", "public-read")

        client.storage.from_.assert_called_with("photos")
        bucket = client.storage.from_.return_value
        bucket.upload.assert_called_once_with(
            path="abc_thumb.jpg",
            file=b"\xff\xd8jpeg-bytes",
            file_options={"content-type": "image/jpeg", "upsert": "true"},
        )
        bucket.get_public_url.assert_called_once_with("abc_thumb.jpg")
        assert url.endswith("/photos/abc_thumb.jpg")

    def test_private_upload_signs_url(self, client, local_file):
        storage = StorageManager(bucket="photos", client=client)
        url = storage.upload(local_file, "/abc_thumb.jpg", "image/jpeg", "private")

        bucket = client.storage.from_.return_value
        bucket.create_signed_url.assert_called_once()
        assert "token=" in url

    def test_unknown_visibility(self, client, local_file):
        storage = StorageManager(client=client)
        with pytest.raises(ValueError):
            storage.upload(local_file, "/abc_thumb.jpg", "image/jpeg", "world-writable")

    def test_upload_error_propagates(self, client, local_file):
        client.storage.from_.return_value.upload.side_effect = RuntimeError("413 Payload Too Large")
        storage = StorageManager(client=client)
        with pytest.raises(RuntimeError):
            storage.upload(local_file, "/abc_thumb.jpg", "image/jpeg")

    def test_missing_local_file(self, client, tmp_path):
        storage = StorageManager(client=client)
        with pytest.raises(OSError):
            storage.upload(str(tmp_path / "gone.jpg"), "/gone.jpg", "image/jpeg")
        client.storage.from_.return_value.upload.assert_not_called()

    def test_bucket_path(self):
        assert StorageManager.bucket_path("/abc_original.jpg") == "abc_original.jpg"
        assert StorageManager.bucket_path("abc_original.jpg") == "abc_original.jpg"


class TestSupabaseClient:

    def test_missing_credentials(self, monkeypatch):
        monkeypatch.delenv("SUPABASE_URL", raising=False)
        monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)
        monkeypatch.setattr(supabase_client, "settings", Settings())
        supabase_client.SupabaseClient.reset()

        with pytest.raises(ValueError):
            supabase_client.get_supabase()

    def test_client_is_cached(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
        monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key")
        monkeypatch.setattr(supabase_client, "settings", Settings())
        created = MagicMock()
        monkeypatch.setattr(supabase_client, "create_client", created)
        supabase_client.SupabaseClient.reset()

        try:
            first = supabase_client.get_supabase()
            second = supabase_client.get_supabase()
        finally:
            supabase_client.SupabaseClient.reset()

        assert first is second
        created.assert_called_once_with("https://example.supabase.co", "anon-key")

    def test_concurrent_first_use_builds_one_client(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
        monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key")
        monkeypatch.setattr(supabase_client, "settings", Settings())
        built = []

        def slow_create_client(url, key):
            time.sleep(0.05)
            client = MagicMock()
            built.append(client)
            return client

        monkeypatch.setattr(supabase_client, "create_client", slow_create_client)
        supabase_client.SupabaseClient.reset()

        storages = [StorageManager() for _ in range(8)]
        seen = []
        threads = [threading.Thread(target=lambda s=s: seen.append(s.client)) for s in storages]
        try:
            for t in threads:
                t.start()
            for t in threads:
                t.join()
        finally:
            supabase_client.SupabaseClient.reset()

        assert len(built) == 1
        assert all(client is built[0] for client in seen)

    def test_storage_uses_shared_client(self, monkeypatch):
        shared = MagicMock()
        monkeypatch.setattr("cartouche.core.storage.get_supabase", lambda: shared)
        assert StorageManager().client is shared
