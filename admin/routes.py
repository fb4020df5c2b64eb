# src/admin/routes.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile, status
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from admin.services import DashboardService, MediaService
from auth.routes import get_current_admin, get_current_admin_api
from auth.schemas import AdminUser
from content.schemas import ContentForm
from content.services import AuthorService, CommentService, ContentService
from database import get_db
from media.storage import StorageError, StorageService, get_storage
from rendering import not_found, templates

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

SERVER_ERROR = "서버 오류가 발생했습니다."


def _see_other(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=status.HTTP_303_SEE_OTHER)


@router.get("")
def admin_index(admin: AdminUser = Depends(get_current_admin)):
    return RedirectResponse(url="/admin/dashboard", status_code=status.HTTP_302_FOUND)


@router.get("/dashboard")
def dashboard(
    request: Request,
    success: Optional[str] = None,
    db: Session = Depends(get_db),
    admin: AdminUser = Depends(get_current_admin),
):
    """Site statistics and the most recent works."""
    return templates.TemplateResponse(request, "admin/dashboard.html", {
        "admin": admin,
        "stats": DashboardService.stats(db),
        "recent_contents": DashboardService.recent_contents(db),
        "success": success,
    })


@router.get("/contents")
def list_contents(
    request: Request,
    category: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    page: int = 1,
    success: Optional[str] = None,
    db: Session = Depends(get_db),
    admin: AdminUser = Depends(get_current_admin),
):
    """Retrieve contents with optional category, status and search filters."""
    search = (search or "").strip() or None
    contents, pagination = ContentService.admin_list(db, category, status, search, page)
    return templates.TemplateResponse(request, "admin/contents.html", {
        "admin": admin,
        "contents": contents,
        "pagination": pagination,
        "filters": {"category": category or "", "status": status or "", "search": search or ""},
        "success": success,
    })


@router.post("/contents")
def content_action(
    intent: str = Form(""),
    contentId: str = Form(""),
    db: Session = Depends(get_db),
    admin: AdminUser = Depends(get_current_admin),
):
    """Toggle publish or featured flags, or delete a work."""
    if intent == "togglePublish":
        found = ContentService.toggle_published(db, contentId) is not None
    elif intent == "toggleFeatured":
        found = ContentService.toggle_featured(db, contentId) is not None
    elif intent == "delete":
        found = ContentService.delete(db, contentId)
    else:
        raise HTTPException(status_code=400, detail="Unknown action")
    if not found:
        raise HTTPException(status_code=404, detail="콘텐츠를 찾을 수 없습니다.")
    logger.info(f"{admin.email}: {intent} {contentId}")
    return _see_other(f"/admin/contents?success={intent}")


def _content_form_page(request: Request, db: Session, admin: AdminUser, form: ContentForm, mode: str,
                       error: Optional[str] = None, content_id: Optional[str] = None, status_code: int = 200):
    return templates.TemplateResponse(
        request,
        "admin/content_form.html",
        {
            "admin": admin,
            "form": form,
            "mode": mode,
            "content_id": content_id,
            "authors": AuthorService.names(db),
            "error": error,
        },
        status_code=status_code,
    )


@router.get("/contents/new")
def new_content_page(request: Request, db: Session = Depends(get_db),
                     admin: AdminUser = Depends(get_current_admin)):
    return _content_form_page(request, db, admin, ContentForm(), "new")


@router.post("/contents/new")
async def create_content(
    request: Request,
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
    admin: AdminUser = Depends(get_current_admin),
):
    """Create a work; a rejected form is shown again with the entered values."""
    data = await request.form()
    form = ContentForm.from_form(data)
    image_file = data.get("image_file")
    if isinstance(image_file, str):
        image_file = None
    try:
        await ContentService.create(db, form, storage, image_file)
    except HTTPException as e:
        return _content_form_page(request, db, admin, form, "new", e.detail, status_code=e.status_code)
    except (SQLAlchemyError, StorageError) as e:
        logger.error(f"Error creating content: {str(e)}", exc_info=True)
        db.rollback()
        return _content_form_page(request, db, admin, form, "new", SERVER_ERROR, status_code=500)
    return RedirectResponse(url="/admin/dashboard?success=content-created", status_code=status.HTTP_302_FOUND)


@router.get("/contents/{content_id}/edit")
def edit_content_page(request: Request, content_id: str, db: Session = Depends(get_db),
                      admin: AdminUser = Depends(get_current_admin)):
    content = ContentService.get(db, content_id)
    if not content:
        return not_found(request, "콘텐츠를 찾을 수 없습니다.")
    form = ContentForm.model_validate(content, from_attributes=True)
    return _content_form_page(request, db, admin, form, "edit", content_id=content_id)


@router.post("/contents/{content_id}/edit")
async def update_content(
    request: Request,
    content_id: str,
    db: Session = Depends(get_db),
    admin: AdminUser = Depends(get_current_admin),
):
    form = ContentForm.from_form(await request.form())
    try:
        content = ContentService.update(db, content_id, form)
    except HTTPException as e:
        return _content_form_page(request, db, admin, form, "edit", e.detail, content_id, e.status_code)
    except SQLAlchemyError as e:
        logger.error(f"Error updating content {content_id}: {str(e)}", exc_info=True)
        db.rollback()
        return _content_form_page(request, db, admin, form, "edit", SERVER_ERROR, content_id, 500)
    if not content:
        return not_found(request, "콘텐츠를 찾을 수 없습니다.")
    return RedirectResponse(url="/admin/contents?success=updated", status_code=status.HTTP_302_FOUND)


def _authors_page(request: Request, db: Session, admin: AdminUser, search: Optional[str],
                  success: Optional[str] = None, error: Optional[str] = None, status_code: int = 200):
    return templates.TemplateResponse(
        request,
        "admin/authors.html",
        {
            "admin": admin,
            "authors": AuthorService.list(db, search),
            "search": search or "",
            "success": success,
            "error": error,
        },
        status_code=status_code,
    )


@router.get("/authors")
def list_authors(
    request: Request,
    search: Optional[str] = None,
    success: Optional[str] = None,
    db: Session = Depends(get_db),
    admin: AdminUser = Depends(get_current_admin),
):
    return _authors_page(request, db, admin, (search or "").strip() or None, success)


@router.post("/authors")
def author_action(
    request: Request,
    intent: str = Form(""),
    authorId: str = Form(""),
    name: str = Form(""),
    bio: str = Form(""),
    profile_image_url: str = Form(""),
    db: Session = Depends(get_db),
    admin: AdminUser = Depends(get_current_admin),
):
    """Create, update or delete an author."""
    try:
        if intent == "create":
            AuthorService.create(db, name, bio, profile_image_url)
        elif intent == "update":
            AuthorService.update(db, authorId, name, bio, profile_image_url)
        elif intent == "delete":
            AuthorService.delete(db, authorId)
        else:
            raise HTTPException(status_code=400, detail="알 수 없는 요청입니다.")
    except HTTPException as e:
        return _authors_page(request, db, admin, None, error=e.detail, status_code=e.status_code)
    except SQLAlchemyError as e:
        logger.error(f"Author {intent} failed: {str(e)}", exc_info=True)
        db.rollback()
        return _authors_page(request, db, admin, None, error=SERVER_ERROR, status_code=500)
    return _see_other(f"/admin/authors?success={intent}")


@router.get("/comments")
def list_comments(
    request: Request,
    status: Optional[str] = None,
    search: Optional[str] = None,
    page: int = 1,
    success: Optional[str] = None,
    db: Session = Depends(get_db),
    admin: AdminUser = Depends(get_current_admin),
):
    """Comment moderation list with report filter and stats."""
    search = (search or "").strip() or None
    comments, pagination = CommentService.admin_list(db, status, search, page)
    return templates.TemplateResponse(request, "admin/comments.html", {
        "admin": admin,
        "comments": comments,
        "pagination": pagination,
        "stats": CommentService.stats(db),
        "filters": {"status": status or "", "search": search or ""},
        "success": success,
    })


@router.post("/comments")
def comment_action(
    intent: str = Form(""),
    commentId: str = Form(""),
    db: Session = Depends(get_db),
    admin: AdminUser = Depends(get_current_admin),
):
    if intent == "delete":
        found = CommentService.delete(db, commentId)
    elif intent == "toggleReport":
        found = CommentService.toggle_report(db, commentId) is not None
    else:
        raise HTTPException(status_code=400, detail="Unknown action")
    if not found:
        raise HTTPException(status_code=404, detail="댓글을 찾을 수 없습니다.")
    return _see_other(f"/admin/comments?success={intent}")


def _media_page(request: Request, storage: StorageService, admin: AdminUser,
                success: Optional[str] = None, error: Optional[str] = None, status_code: int = 200):
    try:
        files = MediaService.list(storage)
    except StorageError as e:
        logger.error(f"Error listing media: {str(e)}", exc_info=True)
        files, error = [], error or "파일 목록을 불러오지 못했습니다."
    return templates.TemplateResponse(
        request,
        "admin/media.html",
        {"admin": admin, "files": files, "success": success, "error": error},
        status_code=status_code,
    )


@router.get("/media")
def list_media(
    request: Request,
    success: Optional[str] = None,
    storage: StorageService = Depends(get_storage),
    admin: AdminUser = Depends(get_current_admin),
):
    """Files in the media bucket, newest first."""
    return _media_page(request, storage, admin, success)


@router.post("/media")
def media_action(
    request: Request,
    intent: str = Form(""),
    fileName: str = Form(""),
    storage: StorageService = Depends(get_storage),
    admin: AdminUser = Depends(get_current_admin),
):
    if intent != "delete":
        return _media_page(request, storage, admin, error="알 수 없는 요청입니다.", status_code=400)
    try:
        MediaService.remove(storage, fileName)
    except HTTPException as e:
        return _media_page(request, storage, admin, error=e.detail, status_code=e.status_code)
    except StorageError as e:
        logger.error(f"Error deleting media {fileName}: {str(e)}", exc_info=True)
        return _media_page(request, storage, admin, error="파일 삭제에 실패했습니다.", status_code=500)
    return _see_other("/admin/media?success=deleted")


@router.post("/upload")
async def upload_file(
    file: Optional[UploadFile] = File(None),
    storage: StorageService = Depends(get_storage),
    admin: AdminUser = Depends(get_current_admin_api),
):
    """Editor upload endpoint; answers JSON."""
    if file is None:
        return JSONResponse(status_code=400, content={"error": "파일이 없습니다."})
    try:
        result = await MediaService.upload(storage, file)
    except HTTPException as e:
        return JSONResponse(status_code=e.status_code, content={"error": e.detail})
    except StorageError as e:
        logger.error(f"Upload failed: {str(e)}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": "업로드에 실패했습니다."})
    return result
