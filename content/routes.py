# src/content/routes.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from content.categories import CATEGORIES, category_info, is_content_category
from content.dedup import client_address
from content.models import Content
from content.schemas import CommentCreate, Pagination, SearchResponse
from content.services import (
    AUTHOR_PAGE_SIZE, CATEGORY_PAGE_SIZE, SEARCH_PAGE_SIZE,
    AuthorService, CommentService, ContentService, EngagementService,
)
from database import get_db
from rendering import not_found, templates

logger = logging.getLogger(__name__)

router = APIRouter(tags=["content"])


def _detail_context(db: Session, content: Content, **extra) -> dict:
    context = {
        "content": content,
        "category_info": category_info(content.category),
        "comments": CommentService.visible(db, content.id),
        "author": AuthorService.get_by_name(db, content.author_name),
        "author_works": ContentService.author_works(db, content),
        "related_works": ContentService.related_works(db, content),
        "comment_error": None,
        "comment_form": {},
    }
    context.update(extra)
    return context


@router.get("/")
async def home(request: Request, db: Session = Depends(get_db)):
    """Home page with the latest works of each category."""
    return templates.TemplateResponse(
        request, "home.html", {"category_contents": ContentService.latest_by_category(db)}
    )


@router.get("/category/{slug}")
async def category_page(
    request: Request,
    slug: str,
    page: int = 1,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Published works of one category, newest first."""
    if not is_content_category(slug):
        return not_found(request, "카테고리를 찾을 수 없습니다.")
    search = (search or "").strip() or None
    try:
        contents, pagination = ContentService.list_published(
            db, category=slug, search=search, page=page, page_size=CATEGORY_PAGE_SIZE
        )
    except SQLAlchemyError as e:
        logger.error(f"Error loading category {slug}: {str(e)}", exc_info=True)
        db.rollback()
        contents, pagination = [], Pagination.empty(CATEGORY_PAGE_SIZE, page)
    return templates.TemplateResponse(request, "category.html", {
        "category": slug,
        "category_info": CATEGORIES[slug],
        "contents": contents,
        "pagination": pagination,
        "search": search or "",
    })


@router.get("/content/{content_id}")
async def content_detail(request: Request, content_id: str, db: Session = Depends(get_db)):
    """Detail page of a published work; counts the view once per client per window."""
    content = ContentService.get_published(db, content_id)
    if not content:
        return not_found(request, "콘텐츠를 찾을 수 없습니다.")
    EngagementService.register_view(db, content, client_address(request))
    return templates.TemplateResponse(request, "content.html", _detail_context(db, content))


@router.post("/content/{content_id}/like")
async def like_content(request: Request, content_id: str, db: Session = Depends(get_db)):
    try:
        result = EngagementService.like(db, content_id, client_address(request))
    except HTTPException as e:
        return JSONResponse(status_code=e.status_code, content={"success": False, "message": e.detail})
    except SQLAlchemyError as e:
        logger.error(f"Error liking content {content_id}: {str(e)}", exc_info=True)
        db.rollback()
        return JSONResponse(status_code=500, content={"success": False, "message": "서버 오류가 발생했습니다."})
    return result


@router.post("/content/{content_id}/comments")
async def add_comment(
    request: Request,
    content_id: str,
    author_name: str = Form(""),
    password: str = Form(""),
    content: str = Form(""),
    db: Session = Depends(get_db),
):
    """Add a visitor comment, re-rendering the page with the message on failure."""
    data = CommentCreate(author_name=author_name.strip(), password=password, content=content.strip())
    try:
        CommentService.create(db, content_id, data, client_address(request))
    except HTTPException as e:
        item = ContentService.get_published(db, content_id)
        if not item:
            return not_found(request, "콘텐츠를 찾을 수 없습니다.")
        return templates.TemplateResponse(
            request,
            "content.html",
            _detail_context(db, item, comment_error=e.detail,
                            comment_form={"author_name": data.author_name, "content": data.content}),
            status_code=e.status_code,
        )
    return RedirectResponse(url=f"/content/{content_id}#comments", status_code=status.HTTP_303_SEE_OTHER)


@router.post("/content/{content_id}/comments/{comment_id}/delete")
async def delete_comment(
    request: Request,
    content_id: str,
    comment_id: str,
    password: str = Form(""),
    db: Session = Depends(get_db),
):
    """Let the writer remove their own comment with the password they chose."""
    try:
        CommentService.delete_own(db, content_id, comment_id, password)
    except HTTPException as e:
        item = ContentService.get_published(db, content_id)
        if not item:
            return not_found(request, "콘텐츠를 찾을 수 없습니다.")
        return templates.TemplateResponse(
            request, "content.html", _detail_context(db, item, comment_error=e.detail), status_code=e.status_code
        )
    return RedirectResponse(url=f"/content/{content_id}#comments", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/author/{author_key}")
async def author_page(
    request: Request,
    author_key: str,
    category: Optional[str] = None,
    page: int = 1,
    db: Session = Depends(get_db),
):
    """Author profile with their published works."""
    author = AuthorService.find(db, author_key)
    if not author:
        return not_found(request, "작가를 찾을 수 없습니다.")
    if category and not is_content_category(category):
        category = None
    contents, pagination = ContentService.list_published(
        db, category=category, author_name=author.name, page=page, page_size=AUTHOR_PAGE_SIZE
    )
    counts = AuthorService.category_counts(db, author.name)
    return templates.TemplateResponse(request, "author.html", {
        "author": author,
        "contents": contents,
        "pagination": pagination,
        "category_counts": counts,
        "total_works": sum(c.count for c in counts),
        "selected_category": category,
    })


@router.get("/search")
async def search_page(
    request: Request,
    q: str = "",
    category: Optional[str] = None,
    page: int = 1,
    db: Session = Depends(get_db),
):
    """Full search across published works."""
    query = q.strip()
    if category and not is_content_category(category):
        category = None
    contents, pagination, error = [], Pagination.empty(SEARCH_PAGE_SIZE, page), None
    if query:
        try:
            contents, pagination = ContentService.list_published(
                db, category=category, search=query, page=page, page_size=SEARCH_PAGE_SIZE
            )
        except SQLAlchemyError as e:
            logger.error(f"Search failed for {query!r}: {str(e)}", exc_info=True)
            db.rollback()
            error = "검색 중 오류가 발생했습니다."
    return templates.TemplateResponse(request, "search.html", {
        "query": query,
        "selected_category": category,
        "contents": contents,
        "pagination": pagination,
        "error": error,
    })


@router.get("/api/search")
async def instant_search(q: str = "", limit: int = 5, db: Session = Depends(get_db)):
    """Instant search used by the header dropdown."""
    query = q.strip()
    if len(query) < 2:
        return {"results": []}
    try:
        results = ContentService.instant_search(db, query, max(1, min(limit, 20)))
    except SQLAlchemyError as e:
        logger.error(f"Instant search failed for {query!r}: {str(e)}", exc_info=True)
        db.rollback()
        return JSONResponse(
            status_code=500,
            content=SearchResponse(error="검색 중 오류가 발생했습니다.").model_dump(mode="json", by_alias=True),
        )
    return JSONResponse(content=SearchResponse(results=results).model_dump(mode="json", by_alias=True))
