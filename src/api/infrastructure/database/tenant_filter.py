"""Universal, fail-closed tenant row filter.

Every ORM SELECT, UPDATE and DELETE executed through the application's
sessions against a model inheriting TenantScopedMixin is narrowed to the
rows visible under the predicate

    NOT enabled OR (context present AND row.tenant_id == context.tenant_id)

where `enabled` is fixed at startup from the deployment mode and the
context is read from the flow-scoped tenant context accessor at execution
time. With filtering enabled and no context, the added criterion is SQL
false: such a query returns no rows, never all of them.

Writes are checked on both write paths. At flush time, new rows without a
tenant_id are stamped from the context, rows belonging to another tenant
are refused with CrossTenantWriteError, and changing a persisted row's
tenant_id is refused with TenantIdImmutableError. ORM-enabled INSERT
statements (`session.execute(insert(Model), [...])`) get the same stamping
and checks per parameter row, and INSERT..FROM SELECT is refused while
filtering is enabled. ORM-enabled UPDATE statements may not assign
tenant_id at all.

Tenant-agnostic code opts out explicitly, per statement with
`.execution_options(include_all_tenants=True)` or per session with
`session.info["include_all_tenants"] = True`.

Usage:
    session_class = build_session_class(
        TenantFilterPolicy.from_deployment_mode(settings.deployment_mode)
    )
    sessionmaker = async_sessionmaker(engine, sync_session_class=session_class)
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import BindParameter, ClauseElement, event, false
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import ORMExecuteState, Session, with_loader_criteria

from infrastructure.database.exceptions import (
    CrossTenantWriteError,
    TenantIdImmutableError,
)
from infrastructure.database.models import TenantScopedMixin
from infrastructure.observability.tenant_filter_probe import DefaultTenantFilterProbe
from shared_kernel.middleware.context_propagator import (
    TenantContextAccessor,
    get_tenant_context_accessor,
)
from shared_kernel.middleware.tenant_context import DeploymentMode, TenantContext

if TYPE_CHECKING:
    from sqlalchemy.orm import UOWTransaction

    from infrastructure.observability.tenant_filter_probe import TenantFilterProbe

INCLUDE_ALL_TENANTS = "include_all_tenants"
TENANT_ID = "tenant_id"


@dataclass(frozen=True)
class TenantFilterPolicy:
    """Whether tenant filtering is enforced, decided once per process."""

    enabled: bool

    @classmethod
    def from_deployment_mode(cls, deployment_mode: DeploymentMode) -> TenantFilterPolicy:
        """Filtering is enforced in SaaS; a self-hosted deployment has one tenant."""
        return cls(enabled=deployment_mode is DeploymentMode.SAAS)

    def allows(self, row_tenant_id: UUID | None, context: TenantContext | None) -> bool:
        """Evaluate the row predicate for a single row in Python."""
        if not self.enabled:
            return True
        return context is not None and row_tenant_id == context.tenant_id


def _mapper_names(execute_state: ORMExecuteState) -> tuple[list[str], bool]:
    names = [mapper.class_.__name__ for mapper in execute_state.all_mappers]
    touches_scoped = any(
        issubclass(mapper.class_, TenantScopedMixin)
        for mapper in execute_state.all_mappers
    )
    return names, touches_scoped


def _tenant_str(value: Any) -> str | None:
    return str(value) if value is not None else None


def _is_bypassed(execute_state: ORMExecuteState) -> bool:
    return bool(
        execute_state.execution_options.get(INCLUDE_ALL_TENANTS, False)
        or execute_state.session.info.get(INCLUDE_ALL_TENANTS, False)
    )


def _column_name(key: Any) -> str:
    """Name of a DML values key, which is either a string or a Column."""
    if isinstance(key, str):
        return key
    return getattr(key, "key", str(key))


def _literal(value: Any) -> Any:
    if isinstance(value, BindParameter):
        return value.value
    return value


def build_session_class(
    policy: TenantFilterPolicy,
    accessor: TenantContextAccessor | None = None,
    probe: TenantFilterProbe | None = None,
) -> type[Session]:
    """Create a Session subclass with the tenant row filter installed.

    Each call returns a distinct class so that listeners are installed
    exactly once per application instance and never leak between them.

    Args:
        policy: Whether filtering is enforced
        accessor: Source of the current tenant context (process-wide by default)
        probe: Observability probe

    Returns:
        A Session subclass for use as an async_sessionmaker's sync_session_class
    """
    accessor = accessor or get_tenant_context_accessor()
    probe = probe or DefaultTenantFilterProbe()

    class TenantFilteredSession(Session):
        tenant_filter_policy = policy

    @event.listens_for(TenantFilteredSession, "do_orm_execute")
    def _apply_tenant_criteria(execute_state: ORMExecuteState) -> None:
        # Criteria on the parent statement already propagate to these loads
        if execute_state.is_column_load or execute_state.is_relationship_load:
            return
        if execute_state.is_insert:
            _guard_bulk_insert(execute_state)
            return
        if not (
            execute_state.is_select
            or execute_state.is_update
            or execute_state.is_delete
        ):
            return
        if execute_state.is_update:
            _guard_bulk_update(execute_state)
        if not policy.enabled:
            return

        names, touches_scoped = _mapper_names(execute_state)
        if _is_bypassed(execute_state):
            if touches_scoped:
                probe.filter_bypassed(names)
            return

        context = accessor.get()
        if context is None:
            if touches_scoped:
                probe.filter_applied_without_context(names)
            execute_state.statement = execute_state.statement.options(
                with_loader_criteria(
                    TenantScopedMixin,
                    lambda cls: false(),
                    include_aliases=True,
                )
            )
            return

        tenant_id = context.tenant_id
        execute_state.statement = execute_state.statement.options(
            with_loader_criteria(
                TenantScopedMixin,
                lambda cls: cls.tenant_id == tenant_id,
                include_aliases=True,
            )
        )

    def _guard_bulk_insert(execute_state: ORMExecuteState) -> None:
        """Stamp and check ORM-enabled INSERT statements.

        Parameter rows, and a single inline VALUES row, that lack a
        tenant_id are stamped from the context. Multi-row VALUES cannot be
        stamped, so every row must name the current tenant. INSERT..FROM
        SELECT is refused while filtering is enabled.
        """
        entity = _scoped_entity(execute_state)
        if entity is None or _is_bypassed(execute_state):
            return

        context = accessor.get()
        statement = execute_state.statement
        if statement.select is not None:
            if policy.enabled:
                _refuse_row(entity, None, context)
            return

        inline = {
            _column_name(key): _literal(value)
            for key, value in (statement._values or {}).items()
        }
        for rows in statement._multi_values:
            for row in rows:
                if isinstance(row, Mapping):
                    values = {_column_name(k): _literal(v) for k, v in row.items()}
                    _check_row(entity, values.get(TENANT_ID), context)
                elif policy.enabled:
                    _refuse_row(entity, None, context)

        params = execute_state.parameters
        if params:
            single = isinstance(params, Mapping)
            stamped = []
            for row in [params] if single else params:
                row = dict(row)
                if row.get(TENANT_ID) is None:
                    row.pop(TENANT_ID, None)
                    if inline.get(TENANT_ID) is None and context is not None:
                        row[TENANT_ID] = context.tenant_id
                        probe.tenant_id_stamped(entity, str(context.tenant_id))
                row_tenant_id = row.get(TENANT_ID, inline.get(TENANT_ID))
                _check_row(entity, row_tenant_id, context)
                stamped.append(row)
            execute_state.parameters = stamped[0] if single else stamped
        elif not statement._multi_values:
            tenant_id = inline.get(TENANT_ID)
            if tenant_id is None and context is not None:
                tenant_id = context.tenant_id
                execute_state.statement = statement.values({TENANT_ID: tenant_id})
                probe.tenant_id_stamped(entity, str(tenant_id))
            _check_row(entity, tenant_id, context)

    def _guard_bulk_update(execute_state: ORMExecuteState) -> None:
        """Refuse ORM-enabled UPDATE statements that assign tenant_id."""
        entity = _scoped_entity(execute_state)
        if entity is None or _is_bypassed(execute_state):
            return

        statement = execute_state.statement
        assigned = [
            _literal(value)
            for key, value in (statement._values or {}).items()
            if _column_name(key) == TENANT_ID
        ]
        params = execute_state.parameters or ()
        for row in [params] if isinstance(params, Mapping) else params:
            if TENANT_ID in row:
                assigned.append(row[TENANT_ID])
        if not assigned:
            return

        context = accessor.get()
        old = _tenant_str(context.tenant_id) if context else None
        new = _tenant_str(assigned[0])
        probe.tenant_id_change_blocked(entity, old, new)
        raise TenantIdImmutableError(entity, old, new)

    def _scoped_entity(execute_state: ORMExecuteState) -> str | None:
        mapper = execute_state.bind_mapper
        if mapper is None or not issubclass(mapper.class_, TenantScopedMixin):
            return None
        return mapper.class_.__name__

    @event.listens_for(TenantFilteredSession, "before_flush")
    def _guard_tenant_writes(
        session: Session,
        flush_context: UOWTransaction,
        instances: Any,
    ) -> None:
        if session.info.get(INCLUDE_ALL_TENANTS, False):
            return

        context = accessor.get()

        for obj in session.new:
            if not isinstance(obj, TenantScopedMixin):
                continue
            entity = type(obj).__name__
            if obj.tenant_id is None and context is not None:
                obj.tenant_id = context.tenant_id
                probe.tenant_id_stamped(entity, str(context.tenant_id))
            _check_row(entity, obj.tenant_id, context)

        for obj in session.dirty:
            if not isinstance(obj, TenantScopedMixin):
                continue
            entity = type(obj).__name__
            history = sa_inspect(obj).attrs.tenant_id.history
            if history.deleted and history.added:
                old, new = history.deleted[0], history.added[0]
                if old is not None and old != new:
                    probe.tenant_id_change_blocked(entity, str(old), str(new))
                    raise TenantIdImmutableError(entity, str(old), str(new))
            _check_row(entity, obj.tenant_id, context)

        for obj in session.deleted:
            if isinstance(obj, TenantScopedMixin):
                _check_row(type(obj).__name__, obj.tenant_id, context)

    def _check_row(
        entity: str, row_tenant_id: Any, context: TenantContext | None
    ) -> None:
        if isinstance(row_tenant_id, ClauseElement):
            # A SQL expression cannot be evaluated here
            allowed = not policy.enabled
        else:
            allowed = policy.allows(row_tenant_id, context)
        if not allowed:
            _refuse_row(entity, row_tenant_id, context)

    def _refuse_row(
        entity: str, row_tenant_id: Any, context: TenantContext | None
    ) -> None:
        context_tenant_id = _tenant_str(context.tenant_id) if context else None
        probe.cross_tenant_write_blocked(
            entity, _tenant_str(row_tenant_id), context_tenant_id
        )
        raise CrossTenantWriteError(
            entity, _tenant_str(row_tenant_id), context_tenant_id
        )

    return TenantFilteredSession
