# src/content/exif.py
import logging
from io import BytesIO
from typing import Any, Dict, Optional

from PIL import Image, ExifTags, UnidentifiedImageError

logger = logging.getLogger(__name__)

EXIF_IFD = 0x8769
GPS_IFD = 0x8825

# EXIF tag name -> key stored in contents.image_exif
BASE_TAGS = {
    "Artist": "photographer",
    "Copyright": "copyright",
    "Software": "software",
    "Orientation": "orientation",
    "DateTime": "dateTime",
}
DETAIL_TAGS = {
    "LensModel": "lens",
    "ISOSpeedRatings": "iso",
    "FNumber": "aperture",
    "ExposureTime": "shutterSpeed",
    "FocalLength": "focalLength",
    "DateTimeOriginal": "dateTime",
    "Flash": "flash",
    "WhiteBalance": "whiteBalance",
    "MeteringMode": "meteringMode",
    "ExposureMode": "exposureMode",
    "ColorSpace": "colorSpace",
}


def _format_value(key: str, value: Any) -> Any:
    if key == "aperture":
        return f"f/{float(value):g}"
    if key == "shutterSpeed":
        seconds = float(value)
        if 0 < seconds < 1:
            return f"1/{round(1 / seconds)}s"
        return f"{seconds:g}s"
    if key == "focalLength":
        return f"{float(value):g}mm"
    if key == "iso":
        return int(value[0] if isinstance(value, tuple) else value)
    if isinstance(value, bytes):
        return value.decode("utf-8", "ignore").strip("\x00 ")
    if isinstance(value, str):
        return value.strip("\x00 ")
    if isinstance(value, (int, float)):
        return value
    return str(value)


def _gps_degrees(values, ref: Optional[str]) -> float:
    degrees, minutes, seconds = (float(v) for v in values)
    decimal = degrees + minutes / 60 + seconds / 3600
    return -decimal if ref in ("S", "W") else decimal


def extract_exif(data: bytes) -> Optional[Dict[str, Any]]:
    """Read camera metadata from an uploaded photo, or None when absent."""
    try:
        with Image.open(BytesIO(data)) as image:
            exif = image.getexif()
    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"Could not read image for EXIF: {str(e)}")
        return None
    if not exif:
        return None

    result: Dict[str, Any] = {}
    make = exif.get(0x010F)
    model = exif.get(0x0110)
    if model:
        model = str(model).strip("\x00 ")
        make = str(make).strip("\x00 ") if make else ""
        result["camera"] = model if not make or model.startswith(make) else f"{make} {model}"

    for tag_id, value in exif.items():
        key = BASE_TAGS.get(ExifTags.TAGS.get(tag_id, ""))
        if key:
            result[key] = _format_value(key, value)

    for tag_id, value in exif.get_ifd(EXIF_IFD).items():
        key = DETAIL_TAGS.get(ExifTags.TAGS.get(tag_id, ""))
        if key:
            try:
                result[key] = _format_value(key, value)
            except (TypeError, ValueError, ZeroDivisionError):
                logger.warning(f"Skipping unreadable EXIF tag {key}: {value!r}")

    gps = exif.get_ifd(GPS_IFD)
    if gps.get(2) and gps.get(4):
        try:
            result["gps"] = {
                "latitude": _gps_degrees(gps[2], gps.get(1)),
                "longitude": _gps_degrees(gps[4], gps.get(3)),
            }
        except (TypeError, ValueError, ZeroDivisionError):
            logger.warning("Skipping unreadable GPS EXIF data")

    return result or None
