# exam_portal/services/errors.py


class ExamPortalError(Exception):
    """Base class for errors raised by the exam portal services."""

    message = "Exam portal error"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class DuplicateEmailError(ExamPortalError):
    message = "User with this email already exists"


class InvalidCredentialsError(ExamPortalError):
    message = "Invalid email, password, or role"


class NotFoundError(ExamPortalError):
    message = "Not found"


class PermissionDeniedError(ExamPortalError):
    message = "You do not have permission to modify this exam"


class NotAuthenticatedError(ExamPortalError):
    message = "You must be logged in"
