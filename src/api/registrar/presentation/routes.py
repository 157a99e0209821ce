"""HTTP routes for the registrar bounded context.

Handlers never filter by tenant themselves: the sessions they receive are
row-filtered, and new rows are stamped with the current tenant on flush.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from iam.dependencies.tenant_context import require_tenant_context
from iam.dependencies.tenant_membership import require_policy
from infrastructure.database.dependencies import get_read_session, get_write_session
from registrar.infrastructure.models import StudentModel
from registrar.presentation.models import CreateStudentRequest, StudentResponse

router = APIRouter(
    prefix="/students",
    tags=["students"],
    dependencies=[
        Depends(require_tenant_context),
        Depends(require_policy("TenantMember")),
    ],
)


@router.get("")
async def list_students(
    session: Annotated[AsyncSession, Depends(get_read_session)],
) -> list[StudentResponse]:
    """List the current organization's students."""
    result = await session.execute(
        select(StudentModel).order_by(StudentModel.last_name, StudentModel.first_name)
    )
    return [StudentResponse.from_model(model) for model in result.scalars()]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_student(
    request: CreateStudentRequest,
    session: Annotated[AsyncSession, Depends(get_write_session)],
) -> StudentResponse:
    """Add a student to the current organization."""
    student = StudentModel(
        first_name=request.first_name,
        last_name=request.last_name,
        grade=request.grade,
        date_of_birth=request.date_of_birth,
    )
    async with session.begin():
        session.add(student)
    return StudentResponse.from_model(student)
