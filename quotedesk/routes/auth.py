from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from quotedesk.auth import (
    authenticate_user,
    clear_session_cookie,
    get_current_user,
    set_session_cookie,
)
from quotedesk.database import get_db
from quotedesk.models.user import User

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    email: str
    password: str


def _serialize_user(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "full_name": user.full_name,
        "role": user.role,
    }


@router.post("/login")
async def login(data: LoginRequest, db: Session = Depends(get_db)):
    """Check credentials and start a session."""
    user = authenticate_user(db, data.email.strip().lower(), data.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    response = JSONResponse({"ok": True, "user": _serialize_user(user)})
    return set_session_cookie(response, user.id)


@router.post("/logout")
async def logout():
    response = JSONResponse({"ok": True})
    return clear_session_cookie(response)


@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    return _serialize_user(user)
