# src/rendering.py
from datetime import datetime
from typing import Optional

from fastapi import Request
from fastapi.templating import Jinja2Templates

from config import BASE_DIR, settings
from content.categories import CATEGORIES, VIDEO_PLATFORMS
from content.text import (
    embed_url, format_file_size, preview_text, reading_time_minutes, relative_time, video_thumbnail_url,
)


def format_date(value: Optional[datetime], fmt: str = "%Y.%m.%d") -> str:
    return value.strftime(fmt) if value else ""


templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))
templates.env.filters.update(
    preview=preview_text,
    reading_time=reading_time_minutes,
    relative_time=relative_time,
    date=format_date,
    filesize=format_file_size,
)


def not_found(request: Request, message: str = "페이지를 찾을 수 없습니다."):
    return templates.TemplateResponse(request, "404.html", {"message": message}, status_code=404)


templates.env.globals.update(
    site_name=settings.SITE_NAME,
    categories=CATEGORIES,
    video_platforms=VIDEO_PLATFORMS,
    embed_url=embed_url,
    video_thumbnail_url=video_thumbnail_url,
)
