# src/auth/routes.py
import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Form, HTTPException, Request, status
from fastapi.responses import RedirectResponse
from typing import Optional
from auth.services import AuthService
from auth.schemas import AdminUser
from config import settings
from rendering import templates

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["auth"])

DEFAULT_REDIRECT = "/admin/dashboard"


class AdminLoginRequired(Exception):
    """Raised on admin pages without a valid session; answered with a login redirect."""

    def __init__(self, redirect_to: str):
        self.redirect_to = redirect_to


def login_redirect(exc: AdminLoginRequired) -> RedirectResponse:
    query = urlencode({"redirectTo": exc.redirect_to})
    return RedirectResponse(url=f"/admin/login?{query}", status_code=status.HTTP_302_FOUND)


def safe_redirect_target(target: Optional[str]) -> str:
    """Only allow local paths so the login form cannot bounce to another site."""
    if not target or not target.startswith("/") or target.startswith("//"):
        return DEFAULT_REDIRECT
    return target


def get_session_email(request: Request) -> Optional[str]:
    session = AuthService.decode_session_token(request.cookies.get(settings.SESSION_COOKIE_NAME))
    return session.sub if session else None


def get_current_admin(request: Request) -> AdminUser:
    """Ensure the request carries an admin session, redirecting to the login page otherwise."""
    email = get_session_email(request)
    if email is None:
        raise AdminLoginRequired(request.url.path)
    if not AuthService.is_admin_email(email):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return AuthService.admin_user(email)


def get_current_admin_api(request: Request) -> AdminUser:
    """Same check for JSON endpoints: 401 instead of a redirect."""
    email = get_session_email(request)
    if email is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    if not AuthService.is_admin_email(email):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return AuthService.admin_user(email)


def _login_page(request: Request, error: Optional[str], email: str, redirect_to: str, status_code: int = 200):
    return templates.TemplateResponse(
        request,
        "admin/login.html",
        {"error": error, "email": email, "redirect_to": redirect_to},
        status_code=status_code,
    )


@router.get("/login")
def login_page(request: Request, redirectTo: Optional[str] = None):
    """Show the login form, or skip it when already signed in."""
    if get_session_email(request):
        return RedirectResponse(url=DEFAULT_REDIRECT, status_code=status.HTTP_302_FOUND)
    return _login_page(request, None, "", safe_redirect_target(redirectTo))


@router.post("/login")
def login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    redirectTo: str = Form(DEFAULT_REDIRECT),
):
    """Check the admin credentials and start a cookie session."""
    redirect_to = safe_redirect_target(redirectTo)
    email = email.strip()
    if not email or not password:
        return _login_page(request, "이메일과 비밀번호를 모두 입력해주세요.", email, redirect_to,
                           status.HTTP_400_BAD_REQUEST)

    user = AuthService.verify_login(email, password)
    if not user:
        return _login_page(request, "이메일 또는 비밀번호가 잘못되었습니다.", email, redirect_to,
                           status.HTTP_401_UNAUTHORIZED)

    logger.info(f"Admin {user.email} signed in")
    response = RedirectResponse(url=redirect_to, status_code=status.HTTP_302_FOUND)
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        AuthService.create_session_token(user.email),
        max_age=settings.SESSION_MAX_AGE_DAYS * 24 * 60 * 60,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
    return response


@router.api_route("/logout", methods=["GET", "POST"])
def logout():
    """Clear the session cookie."""
    response = RedirectResponse(url="/admin/login", status_code=status.HTTP_302_FOUND)
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
    return response
