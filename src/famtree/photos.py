"""Resolution of raw member photo references into fetchable URLs."""

from collections.abc import Callable
from urllib.parse import urlparse

from famtree.config import settings

PhotoResolver = Callable[[str], str | None]


def resolve_photo_url(
    ref: str | None, base_url: str | None = None, uploads_path: str | None = None
) -> str | None:
    """
    Turn a stored photo reference into an absolute URL on the media host.

    Handles:
    - "https://cdn.example.com/a.jpg"  (kept as is)
    - "http://localhost:5000/uploads/a.jpg" (re-homed onto the media host)
    - "/uploads/a.jpg" and "uploads/a.jpg"
    - "/media/a.jpg" (any other absolute path)
    - "a.jpg" (bare filename, placed under the uploads path)

    Returns None for a blank reference.
    """
    if not ref or not str(ref).strip():
        return None

    photo = str(ref).strip()
    base = (base_url if base_url is not None else settings.MEDIA_BASE_URL).rstrip("/")
    uploads = "/" + (uploads_path if uploads_path is not None else settings.UPLOADS_PATH).strip("/")

    if photo.startswith(("http://", "https://")):
        # Plain-http and localhost URLs were stored by a dev server
        if "localhost" in photo or photo.startswith("http://"):
            return f"{base}{urlparse(photo).path}"
        return photo

    if photo.startswith("/"):
        return f"{base}{photo}"
    if photo.startswith(uploads.lstrip("/") + "/"):
        return f"{base}/{photo}"

    return f"{base}{uploads}/{photo}"


def make_photo_resolver(base_url: str | None = None, uploads_path: str | None = None) -> PhotoResolver:
    """Bind a media host so the resolver can be handed to the normalizer."""

    def resolver(ref: str) -> str | None:
        return resolve_photo_url(ref, base_url=base_url, uploads_path=uploads_path)

    return resolver
