"""
Image ingestion — uploaded bytes or a pasted data URL → displayable data URL.
"""
from __future__ import annotations

import base64
import binascii
import io
import re

from PIL import Image, UnidentifiedImageError

_DATA_URL = re.compile(r"^data:(image/[\w.+-]+);base64,(.*)$", re.DOTALL)


class InvalidImageError(ValueError):
    """The payload is not an image Pillow can read."""


def _verify(content: bytes) -> str:
    """Return the MIME type of *content*, raising if it is not an image."""
    try:
        with Image.open(io.BytesIO(content)) as img:
            fmt = img.format
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise InvalidImageError("無法讀取圖片") from e
    return Image.MIME.get(fmt or "", "image/png")


def image_to_data_url(content: bytes) -> str:
    if not content:
        raise InvalidImageError("圖片內容為空")
    mime = _verify(content)
    return f"data:{mime};base64,{base64.b64encode(content).decode('ascii')}"


def _split_data_url(data_url: str) -> bytes:
    m = _DATA_URL.match(data_url.strip())
    if not m:
        raise InvalidImageError("剪貼簿內容不是圖片")
    try:
        return base64.b64decode(m.group(2), validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageError("圖片編碼錯誤") from e


def normalize_data_url(data_url: str) -> str:
    """Check a pasted data URL really holds an image and re-encode it canonically."""
    return image_to_data_url(_split_data_url(data_url))


def decode_data_url(data_url: str) -> Image.Image:
    content = _split_data_url(data_url)
    try:
        img = Image.open(io.BytesIO(content))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidImageError("無法讀取圖片") from e
    return img
