"""
Test helpers — tiny images and a recognition engine that never runs tesseract.
"""
import base64
import io

from PIL import Image

from app.receipts.recognition import RecognitionResult


def png_bytes(size=(8, 8), color="white") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


def png_data_url(**kwargs) -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes(**kwargs)).decode("ascii")


class FakeEngine:
    """Returns a fixed text (or raises) without running tesseract."""

    def __init__(self, text="王小明 簽收", error=None):
        self.text = text
        self.error = error
        self.calls = []

    async def recognize(self, image, language):
        self.calls.append((image, language))
        if self.error is not None:
            raise self.error
        return RecognitionResult(text=self.text)
