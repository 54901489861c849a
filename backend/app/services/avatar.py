"""
Avatar normalization.

Uploaded images are resized to a fixed square and re-encoded as PNG so every
stored avatar has the same shape and content type.
"""
import io
import re

from PIL import Image, UnidentifiedImageError

# Case-sensitive on purpose: "photo.PNG" is rejected like any other extension
ALLOWED_FILENAME_RE = re.compile(r"\.(jpg|jpeg|png)$")


class AvatarError(Exception):
    """Raised when an upload cannot be turned into an avatar."""


def is_allowed_filename(filename: str | None) -> bool:
    return bool(filename) and ALLOWED_FILENAME_RE.search(filename) is not None


def normalize_avatar(data: bytes, size: int = 250) -> bytes:
    """
    Resize raw image bytes to size x size and return PNG bytes.

    CPU bound; call it through run_in_threadpool from async code.

    Raises:
        AvatarError: if the bytes are not a decodable image
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            # PNG cannot store CMYK; palette and alpha modes are kept as RGBA
            if image.mode not in ("RGB", "RGBA", "L", "LA"):
                image = image.convert("RGBA")
            resized = image.resize((size, size))
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise AvatarError("Please upload an image") from exc

    out = io.BytesIO()
    resized.save(out, format="PNG")
    return out.getvalue()
