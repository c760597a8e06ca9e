"""Supabase Storage bucket for meal photos."""

from dataclasses import dataclass
from uuid import uuid4

from supabase import Client

from macro_tracker.domain.staging import StoredPhoto
from macro_tracker.services.staging import PhotoStorage

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}


@dataclass
class SupabasePhotoStorage(PhotoStorage):
    """Supabase Storage implementation for meal photos."""

    client: Client
    bucket: str = "meal-photos"

    def upload_photo(
        self, user_id: str, image_bytes: bytes, content_type: str
    ) -> StoredPhoto:
        """Upload a photo under the user's folder and return its public URL."""
        extension = _EXTENSIONS.get(content_type, "jpg")
        path = f"{user_id}/{uuid4()}.{extension}"
        storage = self.client.storage.from_(self.bucket)
        storage.upload(path, image_bytes, {"content-type": content_type})
        return StoredPhoto(path=path, url=storage.get_public_url(path))

    def delete_photo(self, path: str) -> None:
        """Remove a photo from the bucket."""
        self.client.storage.from_(self.bucket).remove([path])
