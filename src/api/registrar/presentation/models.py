"""Pydantic models for registrar API requests and responses."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field

from registrar.infrastructure.models import StudentModel


class CreateStudentRequest(BaseModel):
    """Request model for enrolling a student.

    The tenant comes from the request's subdomain, never from the body.
    """

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    grade: str | None = Field(default=None, max_length=20)
    date_of_birth: date | None = None


class StudentResponse(BaseModel):
    """Response model for a student."""

    id: str = Field(..., description="Student ID (UUID)")
    first_name: str
    last_name: str
    grade: str | None = None
    date_of_birth: date | None = None

    @classmethod
    def from_model(cls, model: StudentModel) -> StudentResponse:
        return cls(
            id=str(model.id),
            first_name=model.first_name,
            last_name=model.last_name,
            grade=model.grade,
            date_of_birth=model.date_of_birth,
        )
