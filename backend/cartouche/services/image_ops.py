"""
Image inspection and resizing with Pillow.

Derived images are always written as JPEG, whatever the input format.
"""

from pathlib import Path
from typing import Optional, Tuple, Union
from PIL import Image, ImageOps

from cartouche.core.config import settings
from cartouche.models.photo_models import ImageMetadata

PathLike = Union[str, Path]


def inspect_image(path: PathLike) -> ImageMetadata:
    """
    Read the dimensions and format of an image file.

    Raises:
        OSError: If the file is missing or is not a readable image
    """
    with Image.open(path) as img:
        # verify() catches truncated files that open() accepts lazily
        img.verify()
        return ImageMetadata(width=img.width, height=img.height, format=img.format)


def fit_within(size: Tuple[int, int], width: int, height: int) -> Tuple[int, int]:
    """
    Scale ``size`` to the largest size that fits in a width x height box.

    Aspect ratio is preserved; images smaller than the box are enlarged.
    """
    w, h = size
    scale = min(width / w, height / h)
    return max(1, round(w * scale)), max(1, round(h * scale))


def _to_rgb(img: Image.Image) -> Image.Image:
    """Flatten transparency onto white, since JPEG has no alpha channel."""
    if img.mode in ("RGBA", "LA", "PA") or (img.mode == "P" and "transparency" in img.info):
        img = img.convert("RGBA")
        background = Image.new("RGB", img.size, (255, 255, 255))
        background.paste(img, mask=img.split()[3])
        return background
    if img.mode != "RGB":
        return img.convert("RGB")
    return img


def resize_image(
    source_path: PathLike,
    width: int,
    height: int,
    target_path: PathLike,
    quality: Optional[int] = None
) -> Tuple[int, int]:
    """
    Resize an image to fit a bounding box and write it as JPEG.

    Args:
        source_path: Image to read
        width: Maximum output width
        height: Maximum output height
        target_path: Where to write the JPEG
        quality: JPEG quality, defaults to CARTOUCHE_JPEG_QUALITY

    Returns:
        The (width, height) of the written image

    Raises:
        OSError: If the source cannot be read or the target cannot be written
    """
    with Image.open(source_path) as img:
        # Bake the EXIF orientation into the pixels; the tag is not carried over
        upright = ImageOps.exif_transpose(img)
        new_size = fit_within(upright.size, width, height)
        resized = _to_rgb(upright).resize(new_size, Image.Resampling.LANCZOS)

    resized.save(target_path, format="JPEG", quality=quality or settings.JPEG_QUALITY)
    return resized.size
