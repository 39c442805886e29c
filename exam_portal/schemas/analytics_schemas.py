# exam_portal/schemas/analytics_schemas.py
from pydantic import BaseModel
from typing import Dict, List, Optional
from datetime import datetime
from .exam_schemas import Exam, ExamAttempt, User

class ExamStats(BaseModel):
    attempts: int
    avg_score: int
    pass_rate: int
    highest_score: int
    lowest_score: int

class ScoreBucket(BaseModel):
    label: str
    min: int
    max: int
    count: int = 0

class ExamAnalytics(BaseModel):
    exam: Exam
    stats: Optional[ExamStats] = None

class TeacherAnalytics(BaseModel):
    total_exams: int
    total_attempts: int
    unique_students: int
    average_score: int
    pass_rate: int
    score_distribution: List[ScoreBucket]
    exams: List[ExamAnalytics]
    recent_attempts: List[ExamAttempt]

class TeacherDashboard(BaseModel):
    total_exams: int
    total_students: int
    total_attempts: int
    exams: List[ExamAnalytics]

class StudentReport(BaseModel):
    student: User
    total_attempts: int
    average_score: int
    highest_score: int
    lowest_score: int
    completed_exams: int
    total_time_taken: int
    recent_attempts: List[ExamAttempt]

class AttemptWithExam(BaseModel):
    attempt: ExamAttempt
    exam_title: str
    correct_count: int

class StudentExamResult(BaseModel):
    exam_id: str
    exam_title: str
    attempt_count: int
    best_score: int
    latest_score: int
    latest_attempt_id: str
    last_attempt_date: datetime

class StudentDashboard(BaseModel):
    available_exams: List[Exam]
    completed_attempts: int
    average_score: Optional[int] = None
    best_scores: Dict[str, int]  # exam_id -> best score
