"""Supabase Storage adapter for meal images."""

from dataclasses import dataclass

from supabase import Client

from calorie_tracker.domain.meals import StoredImage
from calorie_tracker.services.meals import ImageStorage


@dataclass
class SupabaseImageStorage(ImageStorage):
    """Uploads meal images to a public Supabase Storage bucket."""

    client: Client
    bucket: str = "meal-images"

    def upload(self, path: str, content: bytes, content_type: str) -> StoredImage:
        """Upload the image and return its public URL."""
        storage = self.client.storage.from_(self.bucket)
        storage.upload(
            path=path,
            file=content,
            file_options={"content-type": content_type},
        )
        return StoredImage(path=path, public_url=storage.get_public_url(path))
