"""
Supabase Storage access for uploaded images (blog, shop page, hero tiles).

Uploads go under a named folder and are addressed by their public URL.
"""

import time
import uuid
from typing import Optional
from urllib.parse import unquote, urlparse

from rich.console import Console
from supabase import Client, create_client

from config.settings import config

console = Console()


def get_extension(url_or_name: str, content_type: str = "") -> str:
    """Get file extension from a file name/URL or content-type."""
    lower = url_or_name.lower()
    if ".jpg" in lower or ".jpeg" in lower:
        return ".jpg"
    elif ".png" in lower:
        return ".png"
    elif ".webp" in lower:
        return ".webp"
    elif ".gif" in lower:
        return ".gif"
    elif ".svg" in lower:
        return ".svg"

    # Fall back to content-type
    if "png" in content_type:
        return ".png"
    elif "webp" in content_type:
        return ".webp"
    elif "gif" in content_type:
        return ".gif"
    elif "svg" in content_type:
        return ".svg"

    return ".jpg"


class ImageStorage:
    """
    Uploads and deletes images in a Supabase Storage bucket.
    """

    def __init__(
        self,
        supabase_url: Optional[str] = None,
        supabase_key: Optional[str] = None,
        bucket_name: Optional[str] = None,
        client: Optional[Client] = None,
    ):
        """
        Initialize image storage.

        Args:
            supabase_url: Supabase project URL (or set SUPABASE_URL env var)
            supabase_key: Supabase key with storage write access (or SUPABASE_KEY)
            bucket_name: Storage bucket (default: STORAGE_BUCKET or product-images)
            client: Pre-built Supabase client (skips credential lookup)
        """
        if client is None:
            supabase_url = supabase_url or config.supabase.url
            supabase_key = supabase_key or config.supabase.key
            if not supabase_url or not supabase_key:
                raise ValueError(
                    "Supabase credentials required. Set SUPABASE_URL and SUPABASE_KEY "
                    "environment variables or pass them to the constructor."
                )
            client = create_client(supabase_url, supabase_key)

        self.client = client
        self.bucket_name = bucket_name or config.storage.bucket_name

    @property
    def bucket(self):
        return self.client.storage.from_(self.bucket_name)

    def build_path(self, folder: str, filename: str, content_type: str = "") -> str:
        """Unique object path: folder/<timestamp>-<random><ext>"""
        ext = get_extension(filename, content_type)
        stamp = int(time.time() * 1000)
        return f"{folder.strip('/')}/{stamp}-{uuid.uuid4().hex[:8]}{ext}"

    def upload(
        self,
        folder: str,
        filename: str,
        data: bytes,
        content_type: str = "image/jpeg",
    ) -> str:
        """
        Upload an image and return its public URL.

        Args:
            folder: Folder inside the bucket (e.g. "blog", "hero-grid")
            filename: Original file name, used for the extension
            data: File contents
            content_type: MIME type stored with the object

        Returns:
            Public URL for the uploaded image
        """
        path = self.build_path(folder, filename, content_type)
        self.bucket.upload(path, data, {"content-type": content_type, "upsert": "true"})
        console.print(f"[dim]  Uploaded: {path}[/dim]")
        return self.bucket.get_public_url(path)

    def path_from_url(self, url: str) -> Optional[str]:
        """Object path inside the bucket for one of its public URLs."""
        marker = f"/object/public/{self.bucket_name}/"
        path = unquote(urlparse(url).path)
        if marker not in path:
            return None
        return path.split(marker, 1)[1] or None

    def delete(self, url: str) -> bool:
        """
        Delete an image by public URL.

        Returns:
            True if the object was removed
        """
        path = self.path_from_url(url)
        if not path:
            console.print(f"[yellow]Warning: {url} is not in bucket '{self.bucket_name}'[/yellow]")
            return False

        try:
            self.bucket.remove([path])
        except Exception as e:
            console.print(f"[yellow]Warning: Could not delete image {path}: {e}[/yellow]")
            return False

        console.print(f"[green]Deleted image: {path}[/green]")
        return True
