"""Domain errors raised by the form services.

Endpoints translate these into HTTP responses; services never raise
HTTPException themselves.
"""


class FormError(Exception):
    """Base exception for form, field, collaboration and response operations."""


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


class Unauthenticated(FormError):
    """Raised when an operation needs a caller identity and there is none."""

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class AuthenticationRequired(Unauthenticated):
    """Raised when an anonymous caller submits to a form with ``auth_required``."""

    def __init__(self) -> None:
        super().__init__("Authentication required for this form")


# ---------------------------------------------------------------------------
# Lookup / access
# ---------------------------------------------------------------------------


class NotFound(FormError):
    """Raised when a form, field or collaboration id does not resolve."""


class Forbidden(FormError):
    """Raised when the caller has no role on the form."""


class InsufficientPermission(Forbidden):
    """Raised when the caller's role is below the required minimum."""

    def __init__(self, required: str, actual: str) -> None:
        self.required = required
        self.actual = actual
        super().__init__(f"Insufficient permissions. Required: {required}, You have: {actual}")


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class ValidationError(FormError):
    """Base class for rejected input."""


class InvalidEmail(ValidationError):
    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__("Invalid email format")


class SelfInvite(ValidationError):
    def __init__(self) -> None:
        super().__init__("You cannot invite yourself")


class CreatorAlreadyOwner(ValidationError):
    def __init__(self) -> None:
        super().__init__("Form creator is already the owner")


class AlreadyInvited(ValidationError):
    def __init__(self) -> None:
        super().__init__("Invitation already sent to this user")


class AlreadyCollaborator(ValidationError):
    def __init__(self) -> None:
        super().__init__("User is already a collaborator")


class AlreadyResponded(ValidationError):
    def __init__(self) -> None:
        super().__init__("Invitation has already been responded to")


class InvalidCollaborationState(ValidationError):
    """Raised when a collaboration is in a status that forbids the action."""


class DuplicateSubmission(ValidationError):
    def __init__(self) -> None:
        super().__init__("You have already submitted a response for this form")


class MissingRequiredField(ValidationError):
    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(f'Required field "{field_name}" is missing')


class EmptyRequiredField(ValidationError):
    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(f'Required field "{field_name}" cannot be empty')


class InvalidFieldReference(ValidationError):
    def __init__(self, field_id) -> None:
        self.field_id = field_id
        super().__init__(f"Invalid field ID: {field_id}")


class FieldNameMismatch(ValidationError):
    """Raised when a submitted name differs from the stored field name (stale client schema)."""

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(f'Field name mismatch for field "{field_name}"')


# ---------------------------------------------------------------------------
# Conflicts
# ---------------------------------------------------------------------------


class ConflictError(FormError):
    """Raised when the current state of stored data blocks the operation."""


class FormHasResponses(ConflictError):
    def __init__(self) -> None:
        super().__init__("Form has responses - cannot delete")
