"""Domain errors raised by the service layer.

Learn: Services never raise HTTPException — they raise these, and a single
exception handler (api/errors.py) turns them into HTTP responses. Each
error carries a stable machine-readable ``code`` plus the status it maps to.

Every raise builds a fresh instance. AuthenticationFailure in particular
carries the same message whether the email was unknown or the password
was wrong, so callers can't tell which check failed.
"""


class CodeCollabError(Exception):
    """Base class for all domain errors."""

    code = "error"
    http_status = 500
    default_message = "Internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self) -> dict:
        return {"detail": self.message, "code": self.code}


class Unauthenticated(CodeCollabError):
    """No valid caller identity for an operation that needs one."""

    code = "unauthenticated"
    http_status = 401
    default_message = "Authentication required"


class AuthenticationFailure(CodeCollabError):
    """Login failed (unknown email or wrong password — deliberately indistinguishable)."""

    code = "authentication_failed"
    http_status = 401
    default_message = "Invalid credentials"

    def __init__(self):
        super().__init__()


class Forbidden(CodeCollabError):
    """Caller is authenticated but doesn't own the resource."""

    code = "forbidden"
    http_status = 403
    default_message = "You do not own this resource"


class NotFound(CodeCollabError):
    code = "not_found"
    http_status = 404
    default_message = "Not found"


class EmailAlreadyRegistered(CodeCollabError):
    code = "email_taken"
    http_status = 409
    default_message = "Email already registered"


class ConsistencyGap(CodeCollabError):
    """A multi-step mutation stopped halfway.

    Student and project records are committed separately, so a failure
    between the two writes leaves them disagreeing (an orphaned project
    or a dangling reference). ``kind`` names which one.
    """

    code = "consistency_gap"
    http_status = 500
    default_message = "Operation partially completed"

    def __init__(self, kind: str, student_id=None, project_id=None):
        self.kind = kind
        self.student_id = student_id
        self.project_id = project_id
        super().__init__(f"Operation partially completed ({kind})")
