# src/content/services.py
import logging
import re
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from uuid import uuid4

from fastapi import HTTPException, UploadFile
from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from auth.services import AuthService
from config import settings
from content.categories import CATEGORIES, UPLOAD_FOLDERS, is_content_category, is_video_platform
from content.dedup import RecentHitCache, recent_likes, recent_views
from content.exif import extract_exif
from content.models import Author, Comment, Content
from content.schemas import CategoryCount, CommentCreate, ContentForm, LikeResponse, Pagination, SearchResult
from content.text import preview_text
from media.storage import StorageService

logger = logging.getLogger(__name__)

UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$", re.IGNORECASE)

HOME_ITEMS_PER_CATEGORY = 8
CATEGORY_PAGE_SIZE = 12
AUTHOR_PAGE_SIZE = 12
SEARCH_PAGE_SIZE = 15
ADMIN_PAGE_SIZE = 20
MAX_IMAGE_SIZE = 50 * 1024 * 1024


def _like(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def search_filter(query: Query, term: str) -> Query:
    """Match the term against title, body and author name, case-insensitively."""
    pattern = _like(term)
    return query.filter(or_(
        Content.title.ilike(pattern, escape="\\"),
        Content.content.ilike(pattern, escape="\\"),
        Content.author_name.ilike(pattern, escape="\\"),
    ))


def paginate(query: Query, page: int, page_size: int) -> Tuple[List, Pagination]:
    page = max(page, 1)
    total = query.order_by(None).count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()
    return items, Pagination.build(page, page_size, total)


class ContentService:
    @staticmethod
    def published(db: Session) -> Query:
        return db.query(Content).filter(Content.is_published.is_(True))

    @staticmethod
    def latest_by_category(db: Session, limit: int = HOME_ITEMS_PER_CATEGORY) -> Dict[str, List[Content]]:
        """Newest published items of every category, for the home page sliders."""
        result: Dict[str, List[Content]] = {}
        for category in CATEGORIES:
            try:
                result[category] = (
                    ContentService.published(db)
                    .filter(Content.category == category)
                    .order_by(Content.created_at.desc())
                    .limit(limit)
                    .all()
                )
            except SQLAlchemyError as e:
                logger.error(f"Error loading {category} contents: {str(e)}", exc_info=True)
                db.rollback()
                result[category] = []
        return result

    @staticmethod
    def list_published(
            db: Session,
            category: Optional[str] = None,
            search: Optional[str] = None,
            author_name: Optional[str] = None,
            page: int = 1,
            page_size: int = CATEGORY_PAGE_SIZE,
    ) -> Tuple[List[Content], Pagination]:
        """Published items, newest first, with optional category, author and search filters."""
        query = ContentService.published(db)
        if category:
            query = query.filter(Content.category == category)
        if author_name:
            query = query.filter(Content.author_name == author_name)
        if search:
            query = search_filter(query, search)
        return paginate(query.order_by(Content.created_at.desc()), page, page_size)

    @staticmethod
    def instant_search(db: Session, term: str, limit: int = 5) -> List[SearchResult]:
        rows = (
            search_filter(ContentService.published(db), term)
            .order_by(Content.created_at.desc())
            .limit(limit)
            .all()
        )
        return [
            SearchResult(
                id=row.id,
                title=row.title,
                author_name=row.author_name,
                category=row.category,
                category_info=CATEGORIES.get(row.category, {}),
                view_count=row.view_count,
                likes_count=row.likes_count,
                created_at=row.created_at,
            )
            for row in rows
        ]

    @staticmethod
    def get(db: Session, content_id: str) -> Optional[Content]:
        return db.query(Content).filter(Content.id == content_id).first()

    @staticmethod
    def get_published(db: Session, content_id: str) -> Optional[Content]:
        return ContentService.published(db).filter(Content.id == content_id).first()

    @staticmethod
    def author_works(db: Session, content: Content, limit: int = 5) -> List[Content]:
        """Other published works by the same author."""
        return (
            ContentService.published(db)
            .filter(Content.author_name == content.author_name, Content.id != content.id)
            .order_by(Content.created_at.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def related_works(db: Session, content: Content, limit: int = 3) -> List[Content]:
        """Other published works in the same category."""
        return (
            ContentService.published(db)
            .filter(Content.category == content.category, Content.id != content.id)
            .order_by(Content.created_at.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def admin_list(
            db: Session,
            category: Optional[str] = None,
            status: Optional[str] = None,
            search: Optional[str] = None,
            page: int = 1,
    ) -> Tuple[List[Content], Pagination]:
        """All items for the back office, with category, status and search filters."""
        query = db.query(Content)
        if category and is_content_category(category):
            query = query.filter(Content.category == category)
        if status == "published":
            query = query.filter(Content.is_published.is_(True))
        elif status == "draft":
            query = query.filter(Content.is_published.is_(False))
        elif status == "featured":
            query = query.filter(Content.featured.is_(True))
        if search:
            query = search_filter(query, search)
        return paginate(query.order_by(Content.created_at.desc()), page, ADMIN_PAGE_SIZE)

    @staticmethod
    def validate(form: ContentForm, editing: bool = False) -> None:
        """Check required and category-specific fields; raises HTTPException(400)."""
        if not form.title or not form.content or not form.category or not form.author_name:
            raise HTTPException(status_code=400, detail="제목, 내용, 카테고리, 작가명은 필수 항목입니다.")
        if not is_content_category(form.category):
            raise HTTPException(status_code=400, detail="올바르지 않은 카테고리입니다.")
        if form.category == "poetry" and (not form.original_text or not form.translation):
            raise HTTPException(status_code=400, detail="한시 카테고리는 원문과 번역이 필요합니다.")
        if form.category == "video":
            if not form.video_url:
                raise HTTPException(status_code=400, detail="영상 카테고리는 영상 URL이 필요합니다.")
            if editing and not form.video_platform:
                raise HTTPException(status_code=400, detail="공연영상은 동영상 URL과 플랫폼 정보가 필요합니다.")
        if form.video_platform and not is_video_platform(form.video_platform):
            raise HTTPException(status_code=400, detail="지원하지 않는 영상 플랫폼입니다.")
        if editing and form.category in ("photo", "calligraphy") and not form.image_url:
            raise HTTPException(status_code=400, detail="사진/서화작품은 이미지가 필요합니다.")

    @staticmethod
    def _apply_category_fields(content: Content, form: ContentForm) -> None:
        if form.category == "poetry":
            content.original_text = form.original_text.strip()
            content.translation = form.translation.strip()
        elif form.category == "video":
            content.video_url = form.video_url.strip()
            content.video_platform = form.video_platform
            content.performance_date = form.performance_date
            content.performance_venue = form.performance_venue
        elif form.category == "photo":
            content.image_url = form.image_url
        elif form.category == "calligraphy":
            content.image_url = form.image_url
            content.artwork_size = form.artwork_size
            content.artwork_material = form.artwork_material

    @staticmethod
    async def upload_artwork(category: str, file: UploadFile, storage: StorageService) -> Tuple[str, Optional[dict]]:
        """Store a photo or calligraphy image; returns its public URL and EXIF data."""
        data = await file.read()
        if len(data) > MAX_IMAGE_SIZE:
            raise HTTPException(status_code=400, detail="파일 크기가 너무 큽니다. 최대 50MB까지 업로드 가능합니다.")
        if not (file.content_type or "").startswith("image/"):
            raise HTTPException(status_code=400, detail="이미지 파일만 업로드할 수 있습니다.")

        extension = (file.filename or "").rsplit(".", 1)[-1].lower() if "." in (file.filename or "") else "jpg"
        path = f"{UPLOAD_FOLDERS[category]}/{int(datetime.utcnow().timestamp() * 1000)}-{uuid4().hex[:8]}.{extension}"
        await storage.upload(settings.CONTENT_BUCKET, path, data, file.content_type)
        exif = extract_exif(data) if category == "photo" else None
        return storage.public_url(settings.CONTENT_BUCKET, path), exif

    @staticmethod
    async def create(db: Session, form: ContentForm, storage: StorageService,
                     image_file: Optional[UploadFile] = None) -> Content:
        """Create and publish a content item, uploading its image if one was sent."""
        ContentService.validate(form)

        exif = None
        if form.category in UPLOAD_FOLDERS and image_file is not None and image_file.filename:
            form.image_url, exif = await ContentService.upload_artwork(form.category, image_file, storage)

        author = AuthorService.resolve(db, form.author_name)
        content = Content(
            title=form.title.strip(),
            content=form.content.strip(),
            meta_description=preview_text(form.content, 150),
            category=form.category,
            author_id=author.id,
            author_name=author.name,
            is_published=True,
            thumbnail_url=form.thumbnail_url,
        )
        ContentService._apply_category_fields(content, form)
        if exif:
            content.image_exif = exif
        db.add(content)
        db.commit()
        db.refresh(content)
        logger.info(f"Created {content.category} content {content.id} by {content.author_name}")
        return content

    @staticmethod
    def update(db: Session, content_id: str, form: ContentForm) -> Optional[Content]:
        """Apply the edit form to an existing item."""
        content = ContentService.get(db, content_id)
        if not content:
            return None
        ContentService.validate(form, editing=True)

        author_id = form.author_id
        if not author_id:
            author_id = AuthorService.resolve(db, form.author_name).id

        content.title = form.title.strip()
        content.content = form.content.strip()
        content.meta_description = preview_text(form.content, 150)
        content.category = form.category
        content.author_name = form.author_name.strip()
        content.author_id = author_id
        content.is_published = form.is_published
        content.featured = form.featured
        if form.thumbnail_url is not None:
            content.thumbnail_url = form.thumbnail_url
        ContentService._apply_category_fields(content, form)
        content.updated_at = datetime.utcnow()
        db.commit()
        db.refresh(content)
        return content

    @staticmethod
    def toggle_published(db: Session, content_id: str) -> Optional[Content]:
        content = ContentService.get(db, content_id)
        if not content:
            return None
        content.is_published = not content.is_published
        db.commit()
        db.refresh(content)
        return content

    @staticmethod
    def toggle_featured(db: Session, content_id: str) -> Optional[Content]:
        content = ContentService.get(db, content_id)
        if not content:
            return None
        content.featured = not content.featured
        db.commit()
        db.refresh(content)
        return content

    @staticmethod
    def delete(db: Session, content_id: str) -> bool:
        content = ContentService.get(db, content_id)
        if not content:
            return False
        db.delete(content)
        db.commit()
        logger.info(f"Deleted content {content_id}")
        return True


class AuthorService:
    @staticmethod
    def get(db: Session, author_id: str) -> Optional[Author]:
        return db.query(Author).filter(Author.id == author_id).first()

    @staticmethod
    def get_by_name(db: Session, name: str) -> Optional[Author]:
        return db.query(Author).filter(Author.name == name).first()

    @staticmethod
    def find(db: Session, key: str) -> Optional[Author]:
        """Look an author up by UUID, or by name otherwise.

        The path parameter arrives already percent-decoded by the router.
        """
        if UUID_RE.match(key):
            return AuthorService.get(db, key)
        return AuthorService.get_by_name(db, key)

    @staticmethod
    def resolve(db: Session, name: str) -> Author:
        """Return the author with this name, creating it if needed."""
        name = name.strip()
        author = AuthorService.get_by_name(db, name)
        if author:
            return author
        author = Author(name=name)
        db.add(author)
        db.flush()
        logger.info(f"Created author {name}")
        return author

    @staticmethod
    def list(db: Session, search: Optional[str] = None) -> List[Author]:
        query = db.query(Author)
        if search:
            pattern = _like(search)
            query = query.filter(or_(Author.name.ilike(pattern, escape="\\"), Author.bio.ilike(pattern, escape="\\")))
        return query.order_by(Author.created_at.desc()).all()

    @staticmethod
    def names(db: Session) -> List[Author]:
        return db.query(Author).order_by(Author.name.asc()).all()

    @staticmethod
    def create(db: Session, name: str, bio: Optional[str], profile_image_url: Optional[str]) -> Author:
        name = (name or "").strip()
        if not name:
            raise HTTPException(status_code=400, detail="작가명을 입력해주세요.")
        if AuthorService.get_by_name(db, name):
            raise HTTPException(status_code=400, detail="이미 등록된 작가명입니다.")
        author = Author(
            name=name,
            bio=(bio or "").strip() or None,
            profile_image_url=(profile_image_url or "").strip() or None,
        )
        db.add(author)
        db.commit()
        db.refresh(author)
        return author

    @staticmethod
    def update(db: Session, author_id: str, name: str, bio: Optional[str],
               profile_image_url: Optional[str]) -> Author:
        name = (name or "").strip()
        if not author_id or not name:
            raise HTTPException(status_code=400, detail="필수 정보가 누락되었습니다.")
        author = AuthorService.get(db, author_id)
        if not author:
            raise HTTPException(status_code=404, detail="작가를 찾을 수 없습니다.")
        duplicate = db.query(Author).filter(Author.name == name, Author.id != author_id).first()
        if duplicate:
            raise HTTPException(status_code=400, detail="이미 사용 중인 작가명입니다.")
        author.name = name
        author.bio = (bio or "").strip() or None
        author.profile_image_url = (profile_image_url or "").strip() or None
        author.updated_at = datetime.utcnow()
        db.commit()
        db.refresh(author)
        return author

    @staticmethod
    def delete(db: Session, author_id: str) -> None:
        if not author_id:
            raise HTTPException(status_code=400, detail="작가 ID가 누락되었습니다.")
        author = AuthorService.get(db, author_id)
        if not author:
            raise HTTPException(status_code=404, detail="작가를 찾을 수 없습니다.")
        db.delete(author)
        db.commit()

    @staticmethod
    def category_counts(db: Session, author_name: str) -> List[CategoryCount]:
        """Published works per category for the author page."""
        rows = dict(
            ContentService.published(db)
            .filter(Content.author_name == author_name)
            .with_entities(Content.category, func.count(Content.id))
            .group_by(Content.category)
            .all()
        )
        return [
            CategoryCount(category=slug, name=info["name"], icon=info["icon"], count=rows.get(slug, 0))
            for slug, info in CATEGORIES.items()
        ]


class CommentService:
    @staticmethod
    def visible(db: Session, content_id: str) -> List[Comment]:
        """Comments that were not deleted, oldest first."""
        return (
            db.query(Comment)
            .filter(Comment.content_id == content_id, Comment.is_deleted.is_(False))
            .order_by(Comment.created_at.asc())
            .all()
        )

    @staticmethod
    def validate(data: CommentCreate) -> None:
        if not data.author_name or not data.content or not data.password:
            raise HTTPException(status_code=400, detail="사용자명, 비밀번호, 댓글 내용을 모두 입력해주세요.")
        if not 2 <= len(data.author_name) <= 20:
            raise HTTPException(status_code=400, detail="사용자명은 2-20자 사이로 입력해주세요.")
        if not 4 <= len(data.password) <= 50:
            raise HTTPException(status_code=400, detail="비밀번호는 4-50자 사이로 입력해주세요.")
        if len(data.content) > 2000:
            raise HTTPException(status_code=400, detail="댓글은 2000자 이하로 입력해주세요.")

    @staticmethod
    def create(db: Session, content_id: str, data: CommentCreate, client: str) -> Comment:
        """Add a visitor comment; the password is kept as a bcrypt hash for self-service deletion."""
        CommentService.validate(data)
        if not ContentService.get_published(db, content_id):
            raise HTTPException(status_code=404, detail="콘텐츠를 찾을 수 없습니다.")
        comment = Comment(
            content_id=content_id,
            user_id=client,
            user_name=data.author_name.strip(),
            body=data.content.strip(),
            password_hash=AuthService.hash_password(data.password),
        )
        db.add(comment)
        db.commit()
        db.refresh(comment)
        return comment

    @staticmethod
    def delete_own(db: Session, content_id: str, comment_id: str, password: str) -> None:
        """Soft-delete a comment when the writer's password matches."""
        comment = (
            db.query(Comment)
            .filter(Comment.id == comment_id, Comment.content_id == content_id, Comment.is_deleted.is_(False))
            .first()
        )
        if not comment:
            raise HTTPException(status_code=404, detail="댓글을 찾을 수 없습니다.")
        if not AuthService.verify_password(password or "", comment.password_hash):
            raise HTTPException(status_code=403, detail="비밀번호가 일치하지 않습니다.")
        comment.is_deleted = True
        db.commit()

    @staticmethod
    def admin_list(db: Session, status: Optional[str] = None, search: Optional[str] = None,
                   page: int = 1) -> Tuple[List[Comment], Pagination]:
        query = db.query(Comment)
        if status == "reported":
            query = query.filter(Comment.is_reported.is_(True))
        elif status == "normal":
            query = query.filter(Comment.is_reported.is_(False))
        if search:
            pattern = _like(search)
            query = query.filter(or_(Comment.body.ilike(pattern, escape="\\"),
                                     Comment.user_name.ilike(pattern, escape="\\")))
        return paginate(query.order_by(Comment.created_at.desc()), page, ADMIN_PAGE_SIZE)

    @staticmethod
    def stats(db: Session) -> Dict[str, int]:
        total = db.query(Comment).count()
        reported = db.query(Comment).filter(Comment.is_reported.is_(True)).count()
        return {"total": total, "reported": reported, "normal": total - reported}

    @staticmethod
    def delete(db: Session, comment_id: str) -> bool:
        comment = db.query(Comment).filter(Comment.id == comment_id).first()
        if not comment:
            return False
        db.delete(comment)
        db.commit()
        return True

    @staticmethod
    def toggle_report(db: Session, comment_id: str) -> Optional[Comment]:
        comment = db.query(Comment).filter(Comment.id == comment_id).first()
        if not comment:
            return None
        comment.is_reported = not comment.is_reported
        db.commit()
        db.refresh(comment)
        return comment


class EngagementService:
    """View and like counters with best-effort per-client suppression."""

    @staticmethod
    def register_view(db: Session, content: Content, client: str,
                      cache: RecentHitCache = recent_views) -> bool:
        """Count a view unless this client was counted in the last few minutes.

        Failures are logged and ignored so the page still renders.
        """
        key = RecentHitCache.key(client, content.id)
        if not cache.allows(key):
            return False
        try:
            db.query(Content).filter(Content.id == content.id).update(
                {Content.view_count: Content.view_count + 1}, synchronize_session=False
            )
            db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error updating view count for {content.id}: {str(e)}", exc_info=True)
            db.rollback()
            return False
        db.refresh(content)
        cache.record(key)
        return True

    @staticmethod
    def like(db: Session, content_id: str, client: str, cache: RecentHitCache = recent_likes) -> LikeResponse:
        key = RecentHitCache.key(client, content_id)
        if not cache.allows(key):
            return LikeResponse(success=False, message="이미 좋아요를 눌렀습니다.")

        content = ContentService.get_published(db, content_id)
        if not content:
            raise HTTPException(status_code=404, detail="콘텐츠를 찾을 수 없습니다.")

        db.query(Content).filter(Content.id == content_id).update(
            {Content.likes_count: Content.likes_count + 1}, synchronize_session=False
        )
        db.commit()
        db.refresh(content)
        cache.record(key)
        return LikeResponse(success=True, message="좋아요를 눌렀습니다!", likes_count=content.likes_count)
