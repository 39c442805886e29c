# exam_portal/routers/dependencies.py
from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session
from ..database.database import get_db
from ..database.local_storage import LocalStorage
from ..schemas.exam_schemas import User
from ..services.analytics_service import AnalyticsService
from ..services.errors import (
    DuplicateEmailError,
    ExamPortalError,
    InvalidCredentialsError,
    NotAuthenticatedError,
    NotFoundError,
    PermissionDeniedError,
)
from ..services.exam_service import ExamService
from ..services.record_store import RecordStore
from ..services.session_store import SessionStore

ERROR_STATUS = {
    DuplicateEmailError: 409,
    InvalidCredentialsError: 401,
    NotAuthenticatedError: 401,
    PermissionDeniedError: 403,
    NotFoundError: 404,
}


def to_http_error(error: ExamPortalError) -> HTTPException:
    status = next((code for kind, code in ERROR_STATUS.items() if isinstance(error, kind)), 400)
    return HTTPException(status_code=status, detail=error.message)


def get_storage(db: Session = Depends(get_db)) -> LocalStorage:
    return LocalStorage(db)


def get_record_store(storage: LocalStorage = Depends(get_storage)) -> RecordStore:
    return RecordStore(storage)


def get_session_store(storage: LocalStorage = Depends(get_storage)) -> SessionStore:
    return SessionStore(storage)


def get_exam_service(records: RecordStore = Depends(get_record_store)) -> ExamService:
    return ExamService(records)


def get_analytics_service(
    records: RecordStore = Depends(get_record_store),
    sessions: SessionStore = Depends(get_session_store)
) -> AnalyticsService:
    return AnalyticsService(records, sessions)


def get_current_user(sessions: SessionStore = Depends(get_session_store)) -> User:
    user = sessions.user
    if not user:
        raise to_http_error(NotAuthenticatedError())
    return user
