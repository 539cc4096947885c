from app.models.field_response import FieldResponse
from app.models.form import Form
from app.models.form_collaborator import FormCollaborator
from app.models.form_field import FormField
from app.models.form_response import FormResponse
from app.models.user import User

__all__ = [
    "FieldResponse",
    "Form",
    "FormCollaborator",
    "FormField",
    "FormResponse",
    "User",
]
