import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_DELAY_SECONDS"] = "0"

from datetime import datetime, timezone

import pytest

from exam_portal.database.database import SessionLocal, engine, init_db
from exam_portal.database.local_storage import LocalStorage
from exam_portal.models.storage_models import Base
from exam_portal.schemas.exam_schemas import ExamDraft, QuestionDraft, Role, User
from exam_portal.services.analytics_service import AnalyticsService
from exam_portal.services.exam_service import ExamService
from exam_portal.services.record_store import RecordStore
from exam_portal.services.session_store import SessionStore


@pytest.fixture
def db():
    init_db()
    session = SessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage(db):
    return LocalStorage(db)


@pytest.fixture
def records(storage):
    return RecordStore(storage)


@pytest.fixture
def sessions(storage):
    return SessionStore(storage, auth_delay=0)


@pytest.fixture
def exam_service(records):
    return ExamService(records)


@pytest.fixture
def analytics(records, sessions):
    return AnalyticsService(records, sessions, pass_mark=60)


def make_user(user_id, role, name=None, email=None):
    return User(
        id=user_id,
        name=name or user_id.title(),
        email=email or f"{user_id}@x.com",
        role=role,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def teacher():
    return make_user("teacher", Role.TEACHER)


@pytest.fixture
def student():
    return make_user("student", Role.STUDENT)


def make_draft(title="Quiz A", question_count=2, correct_answer=1):
    return ExamDraft(
        title=title,
        description="Short quiz",
        questions=[
            QuestionDraft(
                text=f"Question {n + 1}",
                options=["first", "second", "third", "fourth"],
                correct_answer=correct_answer,
            )
            for n in range(question_count)
        ],
    )
