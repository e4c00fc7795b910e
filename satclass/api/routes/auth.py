"""
Demo login endpoints: login, logout, current session.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from satclass.api.models import LoginRequest, LoginResponse, SessionResponse
from satclass.auth import Session

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def _get_session_store():
    from satclass.api.main import app_state
    return app_state["session_store"]


def require_session() -> Session:
    """Dependency for protected endpoints; raises AuthenticationError (401)."""
    return _get_session_store().require_auth()


@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest):
    """Check demo credentials and open a 24 h session."""
    result = _get_session_store().login(request.username, request.password, request.remember_me)
    if not result.success:
        raise HTTPException(status_code=401, detail=result.message)
    return LoginResponse(success=result.success, message=result.message, user=result.user)


@router.post("/logout")
async def logout():
    _get_session_store().logout()
    return {"success": True}


@router.get("/session", response_model=SessionResponse)
async def current_session():
    """Return the active session or 401."""
    user = _get_session_store().current_user()
    if user is None:
        raise HTTPException(status_code=401, detail="No active session")
    return SessionResponse(**user)
