"""
Application configuration settings.

Responsibilities:
- Load environment variables
- Define the storage bucket and temp storage location
- Configure encoding quality and logging
"""

import os
from typing import Optional


class Settings:
    PROJECT_NAME: str = "Cartouche"

    def __init__(self):
        self.SUPABASE_URL: Optional[str] = os.getenv("SUPABASE_URL")
        self.SUPABASE_ANON_KEY: Optional[str] = os.getenv("SUPABASE_ANON_KEY")
        self.BUCKET: str = os.getenv("CARTOUCHE_BUCKET", "photos")
        # None falls back to the system temp directory
        self.TMP_DIR: Optional[str] = os.getenv("CARTOUCHE_TMP_DIR") or None
        self.JPEG_QUALITY: int = int(os.getenv("CARTOUCHE_JPEG_QUALITY", "85"))
        self.SIGNED_URL_TTL: int = int(os.getenv("CARTOUCHE_SIGNED_URL_TTL", "3600"))
        self.LOG_LEVEL: str = os.getenv("CARTOUCHE_LOG_LEVEL", "INFO").upper()
        self.LOG_FILE: Optional[str] = os.getenv("CARTOUCHE_LOG_FILE") or None


settings = Settings()
