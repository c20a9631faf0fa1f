"""
Image processing service for imageup.
Decodes uploads with Pillow, applies the field's resize/crop options and
encodes the result for storage.
"""
import logging
from io import BytesIO
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from .exceptions import CodecFailure

logger = logging.getLogger(__name__)


class ImageHandle:
    """
    In-memory image passed through the resize step and the save hooks.

    Operations replace the wrapped Pillow image in place, so a hook that
    resizes the handle changes what gets written to disk.
    """

    DEFAULT_FORMAT = 'PNG'

    def __init__(self, image: Image.Image, format: Optional[str] = None):
        self.image = image
        self.format = format or image.format

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def size(self):
        return self.image.size

    def resize(self, width: int, height: int) -> 'ImageHandle':
        """Resize to exactly width x height, ignoring aspect ratio."""
        self.image = self.image.resize((width, height), Image.Resampling.LANCZOS)
        return self

    def resize_proportional(self, width: Optional[int], height: Optional[int],
                            allow_upsize: bool = True) -> 'ImageHandle':
        """Scale to fit inside width x height, keeping the aspect ratio."""
        ratios = []
        if width:
            ratios.append(width / self.width)
        if height:
            ratios.append(height / self.height)
        if not ratios:
            return self

        ratio = min(ratios)
        if not allow_upsize:
            ratio = min(ratio, 1.0)

        new_size = (max(1, round(self.width * ratio)), max(1, round(self.height * ratio)))
        if new_size != self.size:
            self.image = self.image.resize(new_size, Image.Resampling.LANCZOS)
        return self

    def crop_to_fill(self, width: int, height: int, allow_upsize: bool = True) -> 'ImageHandle':
        """Fill width x height exactly, cropping whatever overflows (centered)."""
        target = (width, height)
        if not allow_upsize:
            ratio = min(1.0, self.width / width, self.height / height)
            target = (max(1, round(width * ratio)), max(1, round(height * ratio)))
        self.image = ImageOps.fit(self.image, target, Image.Resampling.LANCZOS)
        return self

    def crop_at(self, width: int, height: int, x: int, y: int) -> 'ImageHandle':
        """Cut a width x height window whose top-left corner is (x, y)."""
        self.image = self.image.crop((x, y, x + width, y + height))
        return self

    def encode(self, format: Optional[str] = None, quality: Optional[int] = None) -> bytes:
        """
        Encode the image.

        Args:
            format: Pillow format name, defaults to the decoded format
            quality: encoder quality for lossy formats

        Returns:
            Encoded bytes
        """
        fmt = (format or self.format or self.DEFAULT_FORMAT).upper()
        if fmt == 'JPG':
            fmt = 'JPEG'

        img = self.image
        if fmt == 'JPEG' and img.mode != 'RGB':
            img = _flatten_to_rgb(img)

        params = {}
        if fmt in ('JPEG', 'WEBP') and quality:
            params['quality'] = quality
        elif fmt == 'PNG':
            params['optimize'] = True

        output = BytesIO()
        try:
            img.save(output, format=fmt, **params)
        except (OSError, ValueError, KeyError) as e:
            raise CodecFailure(f'Failed to encode image as {fmt}: {e}') from e
        return output.getvalue()

    def release(self):
        if self.image is not None:
            self.image.close()
            self.image = None


def _flatten_to_rgb(img: Image.Image) -> Image.Image:
    # Transparent pixels end up on a white background
    if img.mode in ('RGBA', 'LA', 'P'):
        background = Image.new('RGB', img.size, (255, 255, 255))
        if img.mode != 'RGBA':
            img = img.convert('RGBA')
        background.paste(img, mask=img.split()[-1])
        return background
    return img.convert('RGB')


class ImageProcessor:
    """Decodes uploads and applies width/height/crop field options."""

    @classmethod
    def decode(cls, image_file) -> ImageHandle:
        """
        Open an uploaded file with Pillow.

        Args:
            image_file: Django UploadedFile/File or any binary file object

        Returns:
            ImageHandle with the decoded image
        """
        try:
            if hasattr(image_file, 'seek'):
                image_file.seek(0)
            img = Image.open(image_file)
            img.load()
        except (UnidentifiedImageError, OSError) as e:
            name = getattr(image_file, 'name', 'upload')
            raise CodecFailure(f'Cannot decode image {name}: {e}') from e

        return ImageHandle(img, img.format)

    @staticmethod
    def needs_resizing(options: dict) -> bool:
        return 'width' in options or 'height' in options

    @classmethod
    def resize(cls, handle: ImageHandle, options: dict, crop=False) -> ImageHandle:
        """
        Resize/crop an image according to field options.

        Args:
            handle: decoded image
            options: field options holding width/height
            crop: True to crop-to-fill, an [x, y] pair to crop at an offset,
                anything else for a proportional resize

        Returns:
            The same handle, transformed
        """
        if not cls.needs_resizing(options):
            return handle

        width = options.get('width')
        height = options.get('height')
        crop_height = height or width
        crop_width = width or crop_height

        if crop is True:
            logger.debug(f"Crop to fill {crop_width}x{crop_height} from {handle.size}")
            return handle.crop_to_fill(crop_width, crop_height)

        if isinstance(crop, (list, tuple)) and len(crop) == 2:
            x, y = crop
            logger.debug(f"Crop {crop_width}x{crop_height} at ({x}, {y}) from {handle.size}")
            return handle.crop_at(crop_width, crop_height, x, y)

        logger.debug(f"Resize within {width}x{height} from {handle.size}")
        return handle.resize_proportional(width, height)
