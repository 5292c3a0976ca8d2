"""
Image Optimization Service
Shrink uploaded photos into compact JPEG data URIs for card records
"""

import base64
import logging
from io import BytesIO
from PIL import Image

from badgeforge.config import settings

logger = logging.getLogger(__name__)


class ImageOptimizer:
    """Resize, flatten onto white and re-encode until under the size limit"""
    
    INITIAL_QUALITY = 90
    MIN_QUALITY = 30
    QUALITY_STEP = 10
    RESCALE_FACTOR = 0.7
    
    @staticmethod
    def _fit(img: Image.Image, max_dimension: int) -> Image.Image:
        width, height = img.size
        if width <= max_dimension and height <= max_dimension:
            return img
        
        # Resize keeping aspect ratio
        if width > height:
            new_width = max_dimension
            new_height = max(1, round(height * max_dimension / width))
        else:
            new_height = max_dimension
            new_width = max(1, round(width * max_dimension / height))
        return img.resize((new_width, new_height), Image.Resampling.LANCZOS)
    
    @staticmethod
    def _flatten(img: Image.Image) -> Image.Image:
        """Paint transparent areas white and drop alpha"""
        if img.mode in ('RGBA', 'LA') or (img.mode == 'P' and 'transparency' in img.info):
            rgba = img.convert('RGBA')
            background = Image.new('RGB', rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.split()[-1])
            return background
        return img.convert('RGB') if img.mode != 'RGB' else img
    
    @staticmethod
    def _encode_jpeg(img: Image.Image, quality: int) -> bytes:
        output = BytesIO()
        img.save(output, format='JPEG', quality=quality)
        return output.getvalue()
    
    @staticmethod
    def compress(image_bytes: bytes, max_bytes: int = None, max_dimension: int = None) -> bytes:
        """
        Compress an image to JPEG bytes.
        
        Quality steps down from 90 to 30 until the result fits `max_bytes`;
        if the minimum quality is still too large the image is scaled to 70%
        and encoded once more at minimum quality.
        
        Raises:
            OSError: bytes are not a readable image
        """
        max_bytes = max_bytes or settings.MAX_PHOTO_BYTES
        max_dimension = max_dimension or settings.MAX_PHOTO_DIMENSION
        
        img = Image.open(BytesIO(image_bytes))
        img.load()
        img = ImageOptimizer._flatten(ImageOptimizer._fit(img, max_dimension))
        
        quality = ImageOptimizer.INITIAL_QUALITY
        data = ImageOptimizer._encode_jpeg(img, quality)
        while len(data) > max_bytes and quality > ImageOptimizer.MIN_QUALITY:
            quality -= ImageOptimizer.QUALITY_STEP
            data = ImageOptimizer._encode_jpeg(img, quality)
        
        if len(data) > max_bytes:
            width, height = img.size
            smaller = img.resize(
                (max(1, int(width * ImageOptimizer.RESCALE_FACTOR)), max(1, int(height * ImageOptimizer.RESCALE_FACTOR))),
                Image.Resampling.LANCZOS
            )
            data = ImageOptimizer._encode_jpeg(smaller, ImageOptimizer.MIN_QUALITY)
        
        logger.debug("Compressed photo %d -> %d bytes (quality %d)", len(image_bytes), len(data), quality)
        return data
    
    @staticmethod
    def compress_to_data_uri(image_bytes: bytes) -> str:
        data = ImageOptimizer.compress(image_bytes)
        return "data:image/jpeg;base64," + base64.b64encode(data).decode("ascii")
    
    @staticmethod
    def load_data_uri(data_uri: str) -> Image.Image:
        """
        Open a `data:image/...;base64,` URI as a Pillow image.
        
        Raises:
            ValueError: not a base64 data URI
            OSError: payload is not a readable image
        """
        if not data_uri or not data_uri.startswith("data:") or "," not in data_uri:
            raise ValueError("Not a data URI")
        header, payload = data_uri.split(",", 1)
        if ";base64" not in header:
            raise ValueError("Only base64 data URIs are supported")
        try:
            raw = base64.b64decode(payload, validate=True)
        except ValueError as e:
            raise ValueError(f"Invalid base64 payload: {e}") from e
        img = Image.open(BytesIO(raw))
        img.load()
        return img


# Singleton
image_optimizer = ImageOptimizer()
compress_to_data_uri = image_optimizer.compress_to_data_uri
