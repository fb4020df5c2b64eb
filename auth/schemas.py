# src/auth/schemas.py
from pydantic import BaseModel


class AdminUser(BaseModel):
    """The signed-in back office account."""
    id: str
    email: str
    name: str


class SessionData(BaseModel):
    """Claims carried by the session cookie."""
    sub: str
    exp: int
