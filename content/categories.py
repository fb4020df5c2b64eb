# src/content/categories.py
from typing import Dict, List

CATEGORIES: Dict[str, Dict[str, str]] = {
    "essay": {
        "name": "수필",
        "icon": "📝",
        "description": "마음을 담아 써내려간 수필 작품들",
        "color": "#8B5A2B",
    },
    "poetry": {
        "name": "한시",
        "icon": "📜",
        "description": "전통의 아름다움이 담긴 한시 작품들",
        "color": "#2563EB",
    },
    "photo": {
        "name": "사진",
        "icon": "📸",
        "description": "순간의 아름다움을 포착한 사진 작품들",
        "color": "#059669",
    },
    "calligraphy": {
        "name": "서화",
        "icon": "🖼️",
        "description": "붓끝에 담긴 정성과 예술 작품들",
        "color": "#7C2D12",
    },
    "video": {
        "name": "영상",
        "icon": "🎬",
        "description": "움직이는 이야기가 담긴 영상 작품들",
        "color": "#DC2626",
    },
}

VIDEO_PLATFORMS: List[str] = ["youtube", "vimeo", "other"]

# upload folders inside the content bucket
UPLOAD_FOLDERS: Dict[str, str] = {
    "photo": "category-photo",
    "calligraphy": "category-calligraphy",
}


def is_content_category(value: str) -> bool:
    return value in CATEGORIES


def is_video_platform(value: str) -> bool:
    return value in VIDEO_PLATFORMS


def category_info(slug: str) -> Dict[str, str]:
    """Return display metadata for a category, including its slug."""
    return {"slug": slug, **CATEGORIES[slug]}
