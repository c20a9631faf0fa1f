"""Helpers for building test uploads."""
from io import BytesIO

from PIL import Image


def image_bytes(width=10, height=10, format='JPEG', color=(200, 30, 30)):
    img = Image.new('RGB', (width, height), color)
    output = BytesIO()
    img.save(output, format=format)
    return output.getvalue()
