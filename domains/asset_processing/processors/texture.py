"""
Texture processor.

Validates images through Pillow. Images within ``textures.max_size`` (or
all images, when it is unset) are passed through byte for byte. Larger ones
are downscaled with the configured filter and saved in their original
format, keeping the ICC profile, EXIF block and high JPEG quality.
"""

import io

from loguru import logger
from PIL import Image, UnidentifiedImageError

from app.utils.config import Settings, TextureFilter
from domains.asset_processing.errors import ProcessingError
from domains.asset_processing.processors.base import ProcessorKind
from domains.asset_processing.work import WorkItem

JPEG_QUALITY = 95

RESAMPLING = {
    TextureFilter.NEAREST: Image.Resampling.NEAREST,
    TextureFilter.LINEAR: Image.Resampling.BILINEAR,
}


class TextureProcessor(ProcessorKind):
    name = "texture"

    def extensions(self, settings: Settings) -> list[str]:
        return settings.extensions.texture

    def execute(self, item: WorkItem, settings: Settings) -> bytes:
        try:
            data = item.source.read_bytes()
        except OSError as e:
            raise ProcessingError(f"Failed to read texture: {e}", item.source) from e

        try:
            with Image.open(io.BytesIO(data)) as img:
                img.load()
                image_format = img.format
                output = self._resize(img, settings)
                if output is img:
                    return data

                buffer = io.BytesIO()
                output.save(buffer, format=image_format, **self._save_options(img))
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise ProcessingError(f"Texture decode/encode failed: {e}", item.source) from e

        return buffer.getvalue()

    def _save_options(self, img: Image.Image) -> dict:
        """Encoder options that keep colour data and JPEG quality intact."""
        options = {}
        for key in ("icc_profile", "exif"):
            if img.info.get(key):
                options[key] = img.info[key]
        if img.format == "JPEG":
            options["quality"] = JPEG_QUALITY
            options["subsampling"] = 0
        return options

    def _resize(self, img: Image.Image, settings: Settings) -> Image.Image:
        max_size = settings.textures.max_size
        if not max_size or max(img.size) <= max_size:
            return img

        resized = img.copy()
        resized.thumbnail((max_size, max_size), RESAMPLING[settings.textures.filter])
        logger.debug(f"Downscaled texture {img.size} -> {resized.size}")
        return resized
