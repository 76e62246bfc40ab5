"""
Image Processor Module.

This module prepares uploaded invoice photos and scans for OCR:
    - Decoding image bytes
    - Orientation correction from EXIF
    - RGB conversion
    - Downscaling of oversize images
    - Contrast / sharpness enhancement

Author: ML Engineering Team
"""

import io
from typing import Union

from PIL import Image, ImageEnhance, ImageOps, UnidentifiedImageError

from config import get_config
from invoice_fields.utils.logger import get_logger
from invoice_fields.utils.exceptions import CorruptedFileError

# Initialize module logger
logger = get_logger(__name__)


class ImageProcessor:
    """
    Processor for image uploads (JPG, PNG, TIFF, BMP, ...).

    Attributes:
        max_width: Maximum image width in pixels
        max_height: Maximum image height in pixels
        auto_orient: Whether to auto-correct orientation
        enhance_contrast: Whether to apply contrast enhancement

    Example:
        >>> processor = ImageProcessor()
        >>> image = processor.prepare(image_bytes, "receipt.jpg")
    """

    def __init__(self) -> None:
        """Initialize the image processor with configuration."""
        self.max_width = get_config("acquisition.image.max_width", 2480)
        self.max_height = get_config("acquisition.image.max_height", 3508)
        self.min_width = get_config("acquisition.image.min_width", 500)
        self.min_height = get_config("acquisition.image.min_height", 500)
        self.auto_orient = get_config("acquisition.image.auto_orient", True)
        self.enhance_contrast = get_config("acquisition.image.enhance_contrast", True)

        logger.debug(f"ImageProcessor initialized (max_size={self.max_width}x{self.max_height})")

    def load(self, data: Union[bytes, Image.Image], name: str = "<image>") -> Image.Image:
        """
        Decode image bytes.

        Raises:
            CorruptedFileError: If the bytes are not a readable image.
        """
        if isinstance(data, Image.Image):
            return data

        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise CorruptedFileError(name, str(e))

        return image

    def prepare(self, data: Union[bytes, Image.Image], name: str = "<image>") -> Image.Image:
        """
        Decode and preprocess an image for OCR.

        Processing steps:
            1. Fix orientation from EXIF data
            2. Convert to RGB
            3. Resize if too large
            4. Enhance contrast (optional)
            5. Warn if below minimum size

        Args:
            data: Image bytes or an already decoded image.
            name: Name used in log and error messages.

        Returns:
            Processed PIL Image.

        Raises:
            CorruptedFileError: If the image cannot be decoded.
        """
        image = self.load(data, name)
        original_size = image.size

        if self.auto_orient:
            image = ImageOps.exif_transpose(image)

        image = self._convert_to_rgb(image)
        image = self._resize_if_needed(image)

        if self.enhance_contrast:
            image = self._enhance_image(image)

        self._validate_size(image)

        logger.debug(
            f"Prepared image {name}: {image.width}x{image.height} "
            f"(original: {original_size[0]}x{original_size[1]})"
        )
        return image

    def _convert_to_rgb(self, image: Image.Image) -> Image.Image:
        """
        Convert image to RGB mode.

        Transparent images are flattened onto a white background.
        """
        if image.mode == 'RGB':
            return image

        original_mode = image.mode

        if image.mode in ('RGBA', 'LA') or (image.mode == 'P' and 'transparency' in image.info):
            rgba = image.convert('RGBA')
            background = Image.new('RGB', rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.split()[3])
            image = background
        else:
            image = image.convert('RGB')

        logger.debug(f"Converted image from {original_mode} to RGB")
        return image

    def _resize_if_needed(self, image: Image.Image) -> Image.Image:
        """Downscale to fit max_width x max_height, keeping aspect ratio."""
        width, height = image.size

        if width <= self.max_width and height <= self.max_height:
            return image

        ratio = min(self.max_width / width, self.max_height / height)
        new_size = (max(1, int(width * ratio)), max(1, int(height * ratio)))

        image = image.resize(new_size, Image.Resampling.LANCZOS)

        logger.debug(f"Resized image from {width}x{height} to {new_size[0]}x{new_size[1]}")
        return image

    def _enhance_image(self, image: Image.Image) -> Image.Image:
        # 20% more contrast, 10% more sharpness
        image = ImageEnhance.Contrast(image).enhance(1.2)
        image = ImageEnhance.Sharpness(image).enhance(1.1)
        return image

    def _validate_size(self, image: Image.Image) -> None:
        width, height = image.size

        if width < self.min_width or height < self.min_height:
            # Small images may still OCR fine
            logger.warning(
                f"Image size {width}x{height} below minimum "
                f"{self.min_width}x{self.min_height}"
            )
