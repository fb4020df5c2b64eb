# src/content/text.py
import html
import math
import re
from datetime import datetime
from typing import Optional

TAG_RE = re.compile(r"<[^>]*>")
WHITESPACE_RE = re.compile(r"\s+")
KOREAN_CHAR_RE = re.compile(r"[ㄱ-ㅣ가-힣一-鿿]")
ENGLISH_WORD_RE = re.compile(r"\b[a-zA-Z]+\b")

KOREAN_CHARS_PER_MINUTE = 375
ENGLISH_WORDS_PER_MINUTE = 225

YOUTUBE_PATTERNS = [
    re.compile(r"(?:https?://)?(?:www\.)?youtube\.com/watch\?v=([a-zA-Z0-9_-]{11})"),
    re.compile(r"(?:https?://)?youtu\.be/([a-zA-Z0-9_-]{11})"),
    re.compile(r"(?:https?://)?(?:www\.)?youtube\.com/embed/([a-zA-Z0-9_-]{11})"),
    re.compile(r"(?:https?://)?(?:www\.)?youtube\.com/v/([a-zA-Z0-9_-]{11})"),
]
VIMEO_PATTERNS = [
    re.compile(r"(?:https?://)?(?:www\.)?vimeo\.com/(\d+)"),
    re.compile(r"(?:https?://)?player\.vimeo\.com/video/(\d+)"),
]


def strip_html(value: Optional[str]) -> str:
    """Remove tags, decode entities and collapse whitespace."""
    if not value:
        return ""
    text = html.unescape(TAG_RE.sub("", value)).replace("\xa0", " ")
    return WHITESPACE_RE.sub(" ", text).strip()


def preview_text(value: Optional[str], max_length: int = 150) -> str:
    """Plain-text excerpt for cards and meta descriptions."""
    text = strip_html(value)
    if len(text) <= max_length:
        return text
    truncated = text[:max_length]
    last_space = truncated.rfind(" ")
    if last_space > max_length * 0.8:
        return truncated[:last_space] + "..."
    return truncated + "..."


def clean_text_for_tts(value: Optional[str]) -> str:
    """Plain text with symbols that trip up speech synthesis removed."""
    text = strip_html(value)
    if not text:
        return ""
    text = re.sub(r"([!?.])+", r"\1", text)
    text = re.sub(r"[*#@~`|^]", "", text)
    text = re.sub(r"(\()([^)]*)(\))", r" \1 \2 \3 ", text)
    text = re.sub(r"(\d+)([a-zA-Z가-힣]+)", r"\1 \2", text)
    return WHITESPACE_RE.sub(" ", text).strip()


def reading_time_minutes(value: Optional[str]) -> int:
    text = strip_html(value)
    if not text:
        return 0
    korean = len(KOREAN_CHAR_RE.findall(text)) / KOREAN_CHARS_PER_MINUTE
    english = len(ENGLISH_WORD_RE.findall(text)) / ENGLISH_WORDS_PER_MINUTE
    return max(1, round(korean + english))


def estimate_tts_duration(text: str) -> int:
    """Rough playback length in seconds, ten characters per second."""
    return math.ceil(len(text) / 10)


def extract_youtube_id(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    if len(url) == 11 and re.fullmatch(r"[a-zA-Z0-9_-]+", url):
        return url
    for pattern in YOUTUBE_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def extract_vimeo_id(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    if url.isdigit():
        return url
    for pattern in VIMEO_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def embed_url(platform: Optional[str], url: Optional[str]) -> Optional[str]:
    if not platform or not url:
        return None
    platform = platform.lower()
    if platform == "youtube":
        video_id = extract_youtube_id(url)
        return f"https://www.youtube.com/embed/{video_id}" if video_id else None
    if platform == "vimeo":
        video_id = extract_vimeo_id(url)
        return f"https://player.vimeo.com/video/{video_id}" if video_id else None
    return None


def video_thumbnail_url(platform: Optional[str], url: Optional[str]) -> Optional[str]:
    if not platform or not url:
        return None
    platform = platform.lower()
    if platform == "youtube":
        video_id = extract_youtube_id(url)
        return f"https://img.youtube.com/vi/{video_id}/maxresdefault.jpg" if video_id else None
    if platform == "vimeo":
        video_id = extract_vimeo_id(url)
        return f"https://vumbnail.com/{video_id}.jpg" if video_id else None
    return None


def relative_time(value: Optional[datetime], now: Optional[datetime] = None) -> str:
    if value is None:
        return ""
    now = now or datetime.utcnow()
    seconds = int((now - value).total_seconds())
    if seconds < 0:
        return "미래"
    if seconds < 60:
        return "방금 전"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes}분 전"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}시간 전"
    days = hours // 24
    if days == 1:
        return "어제"
    if days < 7:
        return f"{days}일 전"
    if days < 28:
        return f"{days // 7}주 전"
    if days < 365:
        return f"{max(1, days // 30)}개월 전"
    return f"{days // 365}년 전"


def format_file_size(size: int) -> str:
    if size <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    index = min(int(math.log(size, 1024)), len(units) - 1)
    value = round(size / (1024 ** index), 2)
    return f"{value:g} {units[index]}"
