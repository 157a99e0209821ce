"""Registrar infrastructure - ORM models."""

from registrar.infrastructure.models import (
    CourseModel,
    EnrollmentModel,
    GradeRecordModel,
    PaymentModel,
    StudentModel,
)

__all__ = [
    "CourseModel",
    "EnrollmentModel",
    "GradeRecordModel",
    "PaymentModel",
    "StudentModel",
]
