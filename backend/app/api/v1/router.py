from fastapi import APIRouter

from app.api.v1.endpoints import (
    auth,
    collaborators,
    form_fields,
    forms,
)

api_v1_router = APIRouter()

api_v1_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_v1_router.include_router(forms.router, prefix="/forms", tags=["forms"])
api_v1_router.include_router(form_fields.router, prefix="/form-fields", tags=["form-fields"])
api_v1_router.include_router(collaborators.router, prefix="/collaborators", tags=["collaborators"])
