# exam_portal/routers/exam_router.py
from fastapi import APIRouter, Depends, HTTPException
import logging
from typing import List
from ..schemas.exam_schemas import (
    AttemptSubmission,
    Exam,
    ExamAttempt,
    ExamDraft,
    ExamResultDetail,
    ExamWithQuestions,
    User,
)
from ..services.errors import ExamPortalError
from ..services.exam_service import ExamService
from ..services.record_store import RecordStore
from .dependencies import get_current_user, get_exam_service, get_record_store, to_http_error

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["exams"])

@router.get("/exams", response_model=List[Exam])
def list_exams(
    mine: bool = False,
    user: User = Depends(get_current_user),
    records: RecordStore = Depends(get_record_store)
):
    """All exams, or only the caller's when mine is set."""
    return records.get_exams(user.id if mine else None)

@router.post("/exams", response_model=Exam, status_code=201)
def create_exam(
    draft: ExamDraft,
    user: User = Depends(get_current_user),
    exam_service: ExamService = Depends(get_exam_service)
):
    try:
        return exam_service.create_exam(user, draft)
    except ExamPortalError as e:
        raise to_http_error(e)
    except Exception as e:
        logger.error(f"Error creating exam: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to create exam")

@router.get("/exams/{exam_id}", response_model=ExamWithQuestions)
def get_exam(
    exam_id: str,
    user: User = Depends(get_current_user),
    exam_service: ExamService = Depends(get_exam_service)
):
    try:
        return exam_service.load_exam(exam_id)
    except ExamPortalError as e:
        raise to_http_error(e)

@router.put("/exams/{exam_id}", response_model=Exam)
def update_exam(
    exam_id: str,
    draft: ExamDraft,
    user: User = Depends(get_current_user),
    exam_service: ExamService = Depends(get_exam_service)
):
    try:
        return exam_service.update_exam(exam_id, user, draft)
    except ExamPortalError as e:
        raise to_http_error(e)
    except Exception as e:
        logger.error(f"Error updating exam {exam_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to update exam")

@router.delete("/exams/{exam_id}", status_code=204)
def delete_exam(
    exam_id: str,
    user: User = Depends(get_current_user),
    exam_service: ExamService = Depends(get_exam_service)
):
    try:
        exam_service.delete_exam(exam_id, user)
    except ExamPortalError as e:
        raise to_http_error(e)

@router.post("/exams/{exam_id}/attempts", response_model=ExamAttempt, status_code=201)
def submit_attempt(
    exam_id: str,
    submission: AttemptSubmission,
    user: User = Depends(get_current_user),
    exam_service: ExamService = Depends(get_exam_service)
):
    """Grade and store a completed attempt."""
    try:
        logger.info(f"Received submission for exam {exam_id}")
        return exam_service.submit_attempt(exam_id, user, submission.answers, submission.started_at)
    except ExamPortalError as e:
        raise to_http_error(e)
    except Exception as e:
        logger.error(f"Error processing submission: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to submit exam. Please try again.")

@router.get("/attempts/{attempt_id}/result", response_model=ExamResultDetail)
def get_result(
    attempt_id: str,
    user: User = Depends(get_current_user),
    exam_service: ExamService = Depends(get_exam_service)
):
    try:
        return exam_service.get_result(attempt_id)
    except ExamPortalError as e:
        raise to_http_error(e)
