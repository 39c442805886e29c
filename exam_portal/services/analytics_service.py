# exam_portal/services/analytics_service.py
from typing import Dict, List, Optional
import logging
from ..config import settings
from ..schemas.analytics_schemas import (
    AttemptWithExam,
    ExamAnalytics,
    ExamStats,
    ScoreBucket,
    StudentDashboard,
    StudentExamResult,
    StudentReport,
    TeacherAnalytics,
    TeacherDashboard,
)
from ..schemas.exam_schemas import ExamAttempt, Role
from .record_store import RecordStore
from .scoring import correct_count_from_score, is_passing, round_half_up
from .session_store import SessionStore

logger = logging.getLogger(__name__)

SCORE_RANGES = [
    ("0-20%", 0, 20),
    ("21-40%", 21, 40),
    ("41-60%", 41, 60),
    ("61-80%", 61, 80),
    ("81-100%", 81, 100),
]

REPORT_SORT_KEYS = ("name", "score", "attempts")


def _most_recent_first(attempts: List[ExamAttempt]) -> List[ExamAttempt]:
    return sorted(attempts, key=lambda a: a.completed_at, reverse=True)


def _average(scores: List[int]) -> int:
    return round_half_up(sum(scores) / len(scores)) if scores else 0


class AnalyticsService:
    """Statistics derived from stored attempts. Only completed attempts count."""

    def __init__(self, records: RecordStore, sessions: Optional[SessionStore] = None, pass_mark: Optional[int] = None):
        self.records = records
        self.sessions = sessions
        self.pass_mark = settings.pass_mark if pass_mark is None else pass_mark

    def _completed_attempts(self, exam_id: Optional[str] = None) -> List[ExamAttempt]:
        return [a for a in self.records.get_attempts(exam_id) if a.is_completed]

    def _pass_rate(self, attempts: List[ExamAttempt]) -> int:
        if not attempts:
            return 0
        passed = sum(1 for a in attempts if is_passing(a.score, self.pass_mark))
        return round_half_up(passed / len(attempts) * 100)

    def _stats(self, attempts: List[ExamAttempt]) -> Optional[ExamStats]:
        if not attempts:
            return None
        scores = [a.score for a in attempts]
        return ExamStats(
            attempts=len(attempts),
            avg_score=_average(scores),
            pass_rate=self._pass_rate(attempts),
            highest_score=max(scores),
            lowest_score=min(scores)
        )

    def exam_stats(self, exam_id: str) -> Optional[ExamStats]:
        return self._stats(self._completed_attempts(exam_id))

    @staticmethod
    def score_distribution(attempts: List[ExamAttempt]) -> List[ScoreBucket]:
        buckets = [ScoreBucket(label=label, min=low, max=high) for label, low, high in SCORE_RANGES]
        for attempt in attempts:
            bucket = next((b for b in buckets if b.min <= attempt.score <= b.max), None)
            if bucket:
                bucket.count += 1
        return buckets

    def teacher_analytics(self, teacher_id: str) -> TeacherAnalytics:
        exams = self.records.get_exams(teacher_id)
        attempts = [a for exam in exams for a in self._completed_attempts(exam.id)]

        return TeacherAnalytics(
            total_exams=len(exams),
            total_attempts=len(attempts),
            unique_students=len({a.student_id for a in attempts}),
            average_score=_average([a.score for a in attempts]),
            pass_rate=self._pass_rate(attempts),
            score_distribution=self.score_distribution(attempts),
            exams=[
                ExamAnalytics(exam=exam, stats=self._stats([a for a in attempts if a.exam_id == exam.id]))
                for exam in exams
            ],
            recent_attempts=_most_recent_first(attempts)
        )

    def teacher_dashboard(self, teacher_id: str) -> TeacherDashboard:
        exams = self.records.get_exams(teacher_id)
        exam_ids = {e.id for e in exams}
        return TeacherDashboard(
            total_exams=len(exams),
            total_students=self.records.get_total_students(),
            total_attempts=sum(1 for a in self.records.get_attempts() if a.exam_id in exam_ids),
            exams=[ExamAnalytics(exam=exam, stats=self.exam_stats(exam.id)) for exam in exams]
        )

    def student_reports(self, teacher_id: str, query: str = "", sort_by: str = "name") -> List[StudentReport]:
        """Per-student summaries of attempts on the teacher's exams."""
        if sort_by not in REPORT_SORT_KEYS:
            raise ValueError(f"sort_by must be one of {', '.join(REPORT_SORT_KEYS)}")
        if self.sessions is None:
            raise ValueError("Student reports need access to the user registry")

        exam_ids = {e.id for e in self.records.get_exams(teacher_id)}
        attempts = [a for a in self._completed_attempts() if a.exam_id in exam_ids]

        reports = []
        for student in self.sessions.get_users(Role.STUDENT):
            student_attempts = [a for a in attempts if a.student_id == student.id]
            if not student_attempts:
                continue
            scores = [a.score for a in student_attempts]
            reports.append(StudentReport(
                student=student,
                total_attempts=len(student_attempts),
                average_score=_average(scores),
                highest_score=max(scores),
                lowest_score=min(scores),
                completed_exams=len({a.exam_id for a in student_attempts}),
                total_time_taken=sum(a.time_taken or 0 for a in student_attempts),
                recent_attempts=_most_recent_first(student_attempts)[:5]
            ))

        query = query.strip().lower()
        if query:
            reports = [
                r for r in reports
                if query in r.student.name.lower() or query in r.student.email.lower()
            ]

        if sort_by == "name":
            reports.sort(key=lambda r: r.student.name.lower())
        elif sort_by == "score":
            reports.sort(key=lambda r: r.average_score, reverse=True)
        else:
            reports.sort(key=lambda r: r.total_attempts, reverse=True)
        return reports

    def student_history(self, student_id: str) -> List[AttemptWithExam]:
        history = []
        for attempt in _most_recent_first(
            [a for a in self._completed_attempts() if a.student_id == student_id]
        ):
            exam = self.records.get_exam(attempt.exam_id)
            history.append(AttemptWithExam(
                attempt=attempt,
                exam_title=exam.title if exam else "Unknown Exam",
                correct_count=correct_count_from_score(attempt.score, attempt.total_questions)
            ))
        return history

    def student_results(self, student_id: str) -> List[StudentExamResult]:
        """One row per exam: attempt count, best score and the latest attempt."""
        results: Dict[str, StudentExamResult] = {}
        for entry in self.student_history(student_id):
            attempt = entry.attempt
            existing = results.get(attempt.exam_id)
            if not existing:
                results[attempt.exam_id] = StudentExamResult(
                    exam_id=attempt.exam_id,
                    exam_title=entry.exam_title,
                    attempt_count=1,
                    best_score=attempt.score,
                    latest_score=attempt.score,
                    latest_attempt_id=attempt.id,
                    last_attempt_date=attempt.completed_at
                )
                continue
            existing.attempt_count += 1
            existing.best_score = max(existing.best_score, attempt.score)
            if attempt.completed_at > existing.last_attempt_date:
                existing.latest_score = attempt.score
                existing.latest_attempt_id = attempt.id
                existing.last_attempt_date = attempt.completed_at

        return sorted(results.values(), key=lambda r: r.last_attempt_date, reverse=True)

    def student_dashboard(self, student_id: str) -> StudentDashboard:
        completed = [a for a in self._completed_attempts() if a.student_id == student_id]
        best_scores: Dict[str, int] = {}
        for attempt in completed:
            best_scores[attempt.exam_id] = max(best_scores.get(attempt.exam_id, 0), attempt.score)

        return StudentDashboard(
            available_exams=self.records.get_exams(),
            completed_attempts=len(completed),
            average_score=_average([a.score for a in completed]) if completed else None,
            best_scores=best_scores
        )
