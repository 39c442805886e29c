# exam_portal/schemas/exam_schemas.py
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional, Dict
from datetime import datetime
from enum import Enum
import re

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
OPTION_LETTERS = ("A", "B", "C", "D")

class Role(str, Enum):
    TEACHER = "teacher"
    STUDENT = "student"

class OptionLetter(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"

# Identity

class User(BaseModel):
    id: str
    name: str
    email: str
    role: Role
    created_at: datetime

class StoredUser(User):
    password_hash: str

    def to_user(self) -> User:
        return User(**self.model_dump(exclude={"password_hash"}))

class AuthState(BaseModel):
    user: Optional[User] = None
    isAuthenticated: bool = False

# Stored records

class AnswerOption(BaseModel):
    id: str
    question_id: str
    text: str
    is_correct: bool
    option_letter: OptionLetter

class Question(BaseModel):
    id: str
    exam_id: str
    text: str
    position: int
    answer_options: List[AnswerOption] = Field(default_factory=list)

class Exam(BaseModel):
    id: str
    title: str
    description: str = ""
    created_by: str
    questions_count: int
    created_at: datetime
    updated_at: Optional[datetime] = None

class ExamAttempt(BaseModel):
    id: str
    exam_id: str
    student_id: str
    score: int = Field(ge=0, le=100)
    total_questions: int
    started_at: datetime
    completed_at: Optional[datetime] = None
    time_taken: Optional[int] = None  # seconds

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

class StudentAnswer(BaseModel):
    id: str
    attempt_id: str
    question_id: str
    selected_option_id: str = ""
    is_correct: bool

class ExamWithQuestions(Exam):
    questions: List[Question]

# Requests

class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str
    role: Role

    @field_validator("name")
    def name_required(cls, v):
        if not v or not v.strip():
            raise ValueError("Name is required")
        return v

    @field_validator("email")
    def email_format(cls, v):
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Please enter a valid email address")
        return v

    @field_validator("password")
    def password_required(cls, v):
        if not v:
            raise ValueError("Password is required")
        return v

class LoginRequest(BaseModel):
    email: str
    password: str
    role: Role

class QuestionDraft(BaseModel):
    id: Optional[str] = None  # set when editing an existing question
    text: str
    options: List[str]
    correct_answer: int = 0

    @field_validator("text")
    def text_required(cls, v):
        if not v or not v.strip():
            raise ValueError("Question text is required")
        return v

    @field_validator("options")
    def options_shape(cls, v):
        if not 2 <= len(v) <= len(OPTION_LETTERS):
            raise ValueError(f"A question needs between 2 and {len(OPTION_LETTERS)} options")
        if any(not option or not option.strip() for option in v):
            raise ValueError("Answer options cannot be empty")
        return v

    @field_validator("correct_answer")
    def correct_answer_in_range(cls, v, info):
        options = info.data.get("options")
        if options is not None and not 0 <= v < len(options):
            raise ValueError("Correct answer must point at one of the options")
        return v

class ExamDraft(BaseModel):
    title: str
    description: str = ""
    questions: List[QuestionDraft]

    @field_validator("title")
    def title_required(cls, v):
        if not v or not v.strip():
            raise ValueError("Exam title is required")
        return v

    @field_validator("questions")
    def at_least_one_question(cls, v):
        if not v:
            raise ValueError("An exam needs at least one question")
        return v

class AttemptSubmission(BaseModel):
    answers: Dict[str, str] = Field(default_factory=dict)  # question_id -> option_id
    started_at: Optional[datetime] = None

# Results

class ResultRow(BaseModel):
    question: str
    user_answer: str
    correct_answer: str
    is_correct: bool

class ExamResultDetail(BaseModel):
    attempt: ExamAttempt
    exam_title: str
    correct_count: int
    percentage: int
    grade: str
    time_taken: int
    results: List[ResultRow]
