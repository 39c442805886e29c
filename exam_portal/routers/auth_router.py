# exam_portal/routers/auth_router.py
from fastapi import APIRouter, Depends, HTTPException
import logging
from ..schemas.exam_schemas import AuthState, LoginRequest, RegisterRequest, User
from ..services.errors import ExamPortalError
from ..services.session_store import SessionStore
from .dependencies import get_current_user, get_session_store, to_http_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

@router.post("/register", response_model=User)
async def register(payload: RegisterRequest, sessions: SessionStore = Depends(get_session_store)):
    """Create an account and start a session for it."""
    try:
        return await sessions.register(payload.name, payload.email, payload.password, payload.role)
    except ExamPortalError as e:
        raise to_http_error(e)
    except Exception as e:
        logger.error(f"Error in register: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to register")

@router.post("/login", response_model=User)
async def login(payload: LoginRequest, sessions: SessionStore = Depends(get_session_store)):
    try:
        return await sessions.login(payload.email, payload.password, payload.role)
    except ExamPortalError as e:
        raise to_http_error(e)
    except Exception as e:
        logger.error(f"Error in login: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to log in")

@router.post("/logout", response_model=AuthState)
def logout(sessions: SessionStore = Depends(get_session_store)):
    sessions.logout()
    return AuthState()

@router.get("/me", response_model=User)
def me(user: User = Depends(get_current_user)):
    return user
