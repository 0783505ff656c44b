"""
Thumbnail derivation for published maps.

The gallery shows every map as a wide strip cut from the middle of the map
image. The strip is taken at a fixed scale rather than fitted, so small
images end up centered on a white background.
"""

import io
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image

from ..config.logger_module import log_debug, log_info
from .publisher_models import MapInfo


Box = Tuple[int, int, int, int]  # x, y, width, height


@dataclass(frozen=True)
class ThumbnailSettings:
    """Geometry and encoding of the gallery thumbnail."""

    width: int = 400
    height: int = 100

    # Thumbnail pixels per source pixel
    scale: float = 0.5

    # JPEG quality, 1-100
    quality: int = 80

    background: Tuple[int, int, int] = (255, 255, 255)
    extension: str = "jpg"

    def __post_init__(self):
        """Validate settings values."""
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Thumbnail size must be positive, got {self.width}x{self.height}"
            )
        if self.scale <= 0:
            raise ValueError(f"Thumbnail scale must be positive, got {self.scale}")
        if not 1 <= self.quality <= 100:
            raise ValueError(f"Thumbnail quality must be 1-100, got {self.quality}")


DEFAULT_THUMBNAIL_SETTINGS = ThumbnailSettings()


def compute_crop_box(image_width: int,
                     image_height: int,
                     settings: ThumbnailSettings = DEFAULT_THUMBNAIL_SETTINGS) -> Box:
    """
    Rectangle of the source image that ends up in the thumbnail.

    The rectangle is centered and sized so that it fills the thumbnail at
    the configured scale. On an axis where the source is smaller than that,
    the whole source extent is used starting at 0.
    """
    crop_width = int(round(settings.width / settings.scale))
    crop_height = int(round(settings.height / settings.scale))
    x = (image_width - crop_width) // 2
    y = (image_height - crop_height) // 2

    if crop_width > image_width:
        x = 0
        crop_width = image_width
    if crop_height > image_height:
        y = 0
        crop_height = image_height

    return x, y, crop_width, crop_height


def compute_destination_box(crop_width: int,
                            crop_height: int,
                            settings: ThumbnailSettings = DEFAULT_THUMBNAIL_SETTINGS) -> Box:
    """Where the scaled crop lands on the thumbnail canvas, centered."""
    scaled_width = settings.scale * crop_width
    scaled_height = settings.scale * crop_height

    return (
        int(round((settings.width - scaled_width) / 2)),
        int(round((settings.height - scaled_height) / 2)),
        max(1, int(round(scaled_width))),
        max(1, int(round(scaled_height))),
    )


def select_thumbnail_source(map_info: MapInfo) -> Optional[bytes]:
    """The map image, or the blank map image when there is no map image."""
    if map_info.map_image_data is not None:
        return map_info.map_image_data
    return map_info.blank_map_image_data


def derive_thumbnail(source_bytes: Optional[bytes],
                     settings: ThumbnailSettings = DEFAULT_THUMBNAIL_SETTINGS) -> Optional[bytes]:
    """
    Render the gallery thumbnail for an encoded image.

    Args:
        source_bytes: Encoded source image, or None
        settings: Thumbnail geometry and quality

    Returns:
        JPEG bytes of exactly settings.width x settings.height pixels,
        or None when there is no source image

    Raises:
        PIL.UnidentifiedImageError: If the source cannot be decoded
        OSError: If decoding or encoding fails
    """
    if source_bytes is None:
        return None

    with Image.open(io.BytesIO(source_bytes)) as source:
        source.load()
        image = source.convert("RGBA")

    x, y, crop_width, crop_height = compute_crop_box(image.width, image.height, settings)
    dest_x, dest_y, dest_width, dest_height = compute_destination_box(
        crop_width, crop_height, settings
    )

    log_debug(
        f"Thumbnail crop ({x}, {y}, {crop_width}x{crop_height}) of "
        f"{image.width}x{image.height} -> ({dest_x}, {dest_y}, {dest_width}x{dest_height})"
    )

    region = image.crop((x, y, x + crop_width, y + crop_height))
    region = region.resize((dest_width, dest_height), Image.Resampling.BICUBIC)

    canvas = Image.new("RGB", (settings.width, settings.height), settings.background)
    # Alpha channel as mask so transparent areas show the background
    canvas.paste(region, (dest_x, dest_y), region)

    buffer = io.BytesIO()
    canvas.save(buffer, format="JPEG", quality=settings.quality)
    data = buffer.getvalue()

    log_info(
        f"Created {settings.width}x{settings.height} thumbnail ({len(data)} bytes)"
    )

    return data
