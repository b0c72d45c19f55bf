"""Image decoding: file path or bytes -> RawImageBuffer via Pillow.

This is the only place the pipeline touches I/O, and it runs strictly before
the pipeline starts. Failures surface as DecodeFailure and are never retried.
"""

import io
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from bead_pattern.core.types import RawImageBuffer


class DecodeFailure(Exception):
    """The source image could not be decoded."""


def decode_image(source: str | Path | bytes) -> RawImageBuffer:
    """Decode an image file or in-memory bytes into an RGBA buffer."""
    label = '<bytes>' if isinstance(source, bytes) else str(source)
    try:
        stream = io.BytesIO(source) if isinstance(source, bytes) else source
        with Image.open(stream) as img:
            img.load()
            return RawImageBuffer.from_image(img)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise DecodeFailure(f'Cannot decode image {label}: {exc}') from exc
