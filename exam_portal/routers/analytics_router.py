# exam_portal/routers/analytics_router.py
from fastapi import APIRouter, Depends, HTTPException
from typing import List
from ..schemas.analytics_schemas import (
    AttemptWithExam,
    StudentDashboard,
    StudentExamResult,
    StudentReport,
    TeacherAnalytics,
    TeacherDashboard,
)
from ..schemas.exam_schemas import Role, User
from ..services.analytics_service import AnalyticsService
from ..services.errors import PermissionDeniedError
from .dependencies import get_analytics_service, get_current_user, to_http_error

router = APIRouter(prefix="/api", tags=["analytics"])


def require_teacher(user: User = Depends(get_current_user)) -> User:
    if user.role != Role.TEACHER:
        raise to_http_error(PermissionDeniedError("Teachers only"))
    return user


def require_student(user: User = Depends(get_current_user)) -> User:
    if user.role != Role.STUDENT:
        raise to_http_error(PermissionDeniedError("Students only"))
    return user


@router.get("/analytics/teacher", response_model=TeacherAnalytics)
def teacher_analytics(
    user: User = Depends(require_teacher),
    analytics: AnalyticsService = Depends(get_analytics_service)
):
    return analytics.teacher_analytics(user.id)

@router.get("/analytics/dashboard", response_model=TeacherDashboard)
def teacher_dashboard(
    user: User = Depends(require_teacher),
    analytics: AnalyticsService = Depends(get_analytics_service)
):
    return analytics.teacher_dashboard(user.id)

@router.get("/analytics/reports", response_model=List[StudentReport])
def student_reports(
    q: str = "",
    sort_by: str = "name",
    user: User = Depends(require_teacher),
    analytics: AnalyticsService = Depends(get_analytics_service)
):
    """Per-student reports for the caller's exams, searchable by name or email."""
    try:
        return analytics.student_reports(user.id, query=q, sort_by=sort_by)
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve))

@router.get("/students/me/history", response_model=List[AttemptWithExam])
def student_history(
    user: User = Depends(require_student),
    analytics: AnalyticsService = Depends(get_analytics_service)
):
    return analytics.student_history(user.id)

@router.get("/students/me/results", response_model=List[StudentExamResult])
def student_results(
    user: User = Depends(require_student),
    analytics: AnalyticsService = Depends(get_analytics_service)
):
    return analytics.student_results(user.id)

@router.get("/students/me/dashboard", response_model=StudentDashboard)
def student_dashboard(
    user: User = Depends(require_student),
    analytics: AnalyticsService = Depends(get_analytics_service)
):
    return analytics.student_dashboard(user.id)
