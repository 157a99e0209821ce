"""SQLAlchemy ORM models for the registrar bounded context.

All models inherit TenantScopedMixin. Columns are kept to what the registrar
endpoints need; relationships exist so that lazy and eager loads exercise
the tenant row filter as well.
"""

from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import Date, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from infrastructure.database.models import Base, TenantScopedMixin, TimestampMixin


class StudentModel(Base, TenantScopedMixin, TimestampMixin):
    """ORM model for students table."""

    __tablename__ = "students"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    grade: Mapped[str | None] = mapped_column(String(20))
    date_of_birth: Mapped[date | None] = mapped_column(Date)

    enrollments: Mapped[list[EnrollmentModel]] = relationship(
        back_populates="student"
    )

    def __repr__(self) -> str:
        return f"<StudentModel(id={self.id}, tenant_id={self.tenant_id})>"


class CourseModel(Base, TenantScopedMixin, TimestampMixin):
    """ORM model for courses table."""

    __tablename__ = "courses"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    code: Mapped[str | None] = mapped_column(String(20))

    enrollments: Mapped[list[EnrollmentModel]] = relationship(
        back_populates="course"
    )


class EnrollmentModel(Base, TenantScopedMixin, TimestampMixin):
    """ORM model for enrollments table."""

    __tablename__ = "enrollments"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    student_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("students.id"), nullable=False, index=True
    )
    course_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("courses.id"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="enrolled")

    student: Mapped[StudentModel] = relationship(back_populates="enrollments")
    course: Mapped[CourseModel] = relationship(back_populates="enrollments")


class PaymentModel(Base, TenantScopedMixin, TimestampMixin):
    """ORM model for payments table. Amounts are stored in cents."""

    __tablename__ = "payments"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    enrollment_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("enrollments.id"), index=True
    )
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")


class GradeRecordModel(Base, TenantScopedMixin, TimestampMixin):
    """ORM model for grade_records table."""

    __tablename__ = "grade_records"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    enrollment_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("enrollments.id"), nullable=False, index=True
    )
    letter_grade: Mapped[str | None] = mapped_column(String(5))
    comments: Mapped[str | None] = mapped_column(String(1000))
