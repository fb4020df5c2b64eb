# src/admin/services.py
import logging
from typing import Dict, List
from uuid import uuid4

from fastapi import HTTPException, UploadFile
from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import settings
from content.categories import CATEGORIES
from content.models import Comment, Content
from media.storage import StorageService, StoredFile

logger = logging.getLogger(__name__)

MAX_UPLOAD_SIZE = 50 * 1024 * 1024
ALLOWED_UPLOAD_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
    "video/mp4",
    "video/webm",
    "application/pdf",
}
MEDIA_LIST_LIMIT = 100


class DashboardStats(BaseModel):
    total_contents: int = 0
    published_contents: int = 0
    total_views: int = 0
    total_likes: int = 0
    total_comments: int = 0
    category_counts: Dict[str, int] = {}


class UploadResult(BaseModel):
    success: bool = True
    url: str
    fileName: str
    originalName: str
    size: int
    type: str


class DashboardService:
    @staticmethod
    def stats(db: Session) -> DashboardStats:
        """Site totals for the dashboard; zeroed as a whole when any query fails."""
        try:
            published = db.query(Content).filter(Content.is_published.is_(True))
            views, likes = published.with_entities(
                func.coalesce(func.sum(Content.view_count), 0),
                func.coalesce(func.sum(Content.likes_count), 0),
            ).one()
            counts = dict(
                published.with_entities(Content.category, func.count(Content.id))
                .group_by(Content.category)
                .all()
            )
            return DashboardStats(
                total_contents=db.query(Content).count(),
                published_contents=published.count(),
                total_views=int(views),
                total_likes=int(likes),
                total_comments=db.query(Comment).count(),
                category_counts={slug: counts.get(slug, 0) for slug in CATEGORIES},
            )
        except SQLAlchemyError as e:
            logger.error(f"Error loading dashboard stats: {str(e)}", exc_info=True)
            db.rollback()
            return DashboardStats(category_counts={slug: 0 for slug in CATEGORIES})

    @staticmethod
    def recent_contents(db: Session, limit: int = 5) -> List[Content]:
        try:
            return db.query(Content).order_by(Content.created_at.desc()).limit(limit).all()
        except SQLAlchemyError as e:
            logger.error(f"Error loading recent contents: {str(e)}", exc_info=True)
            db.rollback()
            return []


class MediaService:
    @staticmethod
    def list(storage: StorageService) -> List[StoredFile]:
        return storage.list(settings.MEDIA_BUCKET, limit=MEDIA_LIST_LIMIT)

    @staticmethod
    def remove(storage: StorageService, file_name: str) -> None:
        if not file_name:
            raise HTTPException(status_code=400, detail="파일명이 필요합니다.")
        storage.remove(settings.MEDIA_BUCKET, [file_name])
        logger.info(f"Removed media file {file_name}")

    @staticmethod
    async def upload(storage: StorageService, file: UploadFile) -> UploadResult:
        """Store an editor upload as uploads/<uuid>.<ext> in the media bucket."""
        data = await file.read()
        if not data:
            raise HTTPException(status_code=400, detail="파일이 없습니다.")
        if len(data) > MAX_UPLOAD_SIZE:
            raise HTTPException(status_code=400, detail="파일 크기가 너무 큽니다. 최대 50MB까지 업로드 가능합니다.")
        if file.content_type not in ALLOWED_UPLOAD_TYPES:
            raise HTTPException(status_code=400, detail="지원하지 않는 파일 형식입니다.")

        original = file.filename or "upload"
        extension = original.rsplit(".", 1)[-1].lower() if "." in original else "bin"
        path = f"uploads/{uuid4()}.{extension}"
        await storage.upload(settings.MEDIA_BUCKET, path, data, file.content_type)
        logger.info(f"Uploaded {original} as {path}")
        return UploadResult(
            url=storage.public_url(settings.MEDIA_BUCKET, path),
            fileName=path,
            originalName=original,
            size=len(data),
            type=file.content_type,
        )
