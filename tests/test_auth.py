from datetime import timedelta

from auth.services import AuthService
from config import settings


def test_admin_page_redirects_to_login_without_session(client):
    response = client.get("/admin/dashboard", follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] == "/admin/login?redirectTo=%2Fadmin%2Fdashboard"


def test_login_sets_session_cookie(client, admin_password):
    response = client.post(
        "/admin/login",
        data={"email": "admin@example.com", "password": admin_password, "redirectTo": "/admin/contents"},
        follow_redirects=False,
    )
    assert response.status_code == 302
    assert response.headers["location"] == "/admin/contents"
    cookie = response.headers["set-cookie"]
    assert cookie.startswith(f"{settings.SESSION_COOKIE_NAME}=")
    assert "HttpOnly" in cookie
    assert "samesite=lax" in cookie.lower()

    assert client.get("/admin/dashboard").status_code == 200


def test_login_ignores_external_redirect(client, admin_password):
    response = client.post(
        "/admin/login",
        data={"email": "admin@example.com", "password": admin_password, "redirectTo": "//evil.example.com"},
        follow_redirects=False,
    )
    assert response.headers["location"] == "/admin/dashboard"


def test_login_with_missing_fields(client):
    response = client.post("/admin/login", data={"email": "admin@example.com"})
    assert response.status_code == 400
    assert "이메일과 비밀번호를 모두 입력해주세요." in response.text


def test_login_with_wrong_password_keeps_email(client):
    response = client.post("/admin/login", data={"email": "admin@example.com", "password": "nope"})
    assert response.status_code == 401
    assert "이메일 또는 비밀번호가 잘못되었습니다." in response.text
    assert 'value="admin@example.com"' in response.text


def test_allow_listed_email_without_account_cannot_log_in(client, admin_password):
    response = client.post("/admin/login", data={"email": "editor@example.com", "password": admin_password})
    assert response.status_code == 401


def test_session_for_unlisted_email_is_forbidden(client):
    client.cookies.set(settings.SESSION_COOKIE_NAME, AuthService.create_session_token("someone@example.com"))
    assert client.get("/admin/dashboard").status_code == 403


def test_expired_session_redirects(client):
    token = AuthService.create_session_token("admin@example.com", expires_delta=timedelta(seconds=-1))
    client.cookies.set(settings.SESSION_COOKIE_NAME, token)
    response = client.get("/admin/contents", follow_redirects=False)
    assert response.status_code == 302


def test_login_page_skips_form_when_signed_in(admin_client):
    response = admin_client.get("/admin/login", follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] == "/admin/dashboard"


def test_logout_clears_cookie(admin_client):
    response = admin_client.post("/admin/logout", follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] == "/admin/login"
    assert "Max-Age=0" in response.headers["set-cookie"]


def test_upload_endpoint_answers_401_without_session(client):
    response = client.post("/admin/upload", files={"file": ("a.png", b"data", "image/png")})
    assert response.status_code == 401


def test_password_helpers():
    hashed = AuthService.hash_password("secret")
    assert AuthService.verify_password("secret", hashed)
    assert not AuthService.verify_password("other", hashed)
    assert not AuthService.verify_password("secret", "")
