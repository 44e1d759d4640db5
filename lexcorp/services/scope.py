"""
services/scope.py
-----------------
Branch-scope policy shared by every scoped resource (agreements, templates,
vendors, projects).

A scoped row has a required organization_id and a nullable
branch_office_id: null means organization-wide, a value means owned by
that branch. Reads are filtered by branch_scope_clause(); writes get their
branch from resolve_write_branch(). This filter is the only access control
for scoped rows, so every service goes through here.

Read rules, first match wins:

  1. scope=branch, branch given     → branch_office_id = X
  2. scope=branch, no branch        → branch_office_id IS NOT NULL
  3. scope=organization             → branch_office_id IS NULL
  4. no scope, branch given         → branch_office_id = X OR IS NULL
  5. anything else (incl. scope=all) → no branch filter
"""

from dataclasses import dataclass
from enum import Enum as PyEnum
from typing import Any, Optional

from sqlalchemy import Select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from lexcorp.core.exceptions import InvalidInputError, NotFoundError, PermissionDeniedError
from lexcorp.models.organization import BranchOffice
from lexcorp.services.principal import Principal


class ResourceScope(str, PyEnum):
    all = "all"
    organization = "organization"
    branch = "branch"


@dataclass(frozen=True)
class ScopeParams:
    organization_id: str
    branch_office_id: Optional[str] = None
    scope: Optional[ResourceScope] = None

    @classmethod
    def for_principal(
        cls,
        principal: Principal,
        scope: Optional[ResourceScope] = None,
        branch_office_id: Optional[str] = None,
    ) -> "ScopeParams":
        """
        Derive list parameters from the principal.

        org_admins browse with whatever scope / target branch they ask for.
        Branch members are pinned to their own branch: 'organization' and
        'branch' narrow the view, while 'all' or no scope yields own branch
        plus organization-wide rows. A requested target branch is ignored.
        A branch member without a branch only sees organization-wide rows.
        """
        if principal.is_org_admin:
            return cls(principal.organization_id, branch_office_id, scope)
        if principal.branch_office_id is None:
            return cls(principal.organization_id, None, ResourceScope.organization)
        if scope is ResourceScope.all:
            scope = None
        return cls(principal.organization_id, principal.branch_office_id, scope)


def branch_scope_clause(
    column: Any,
    branch_office_id: Optional[str],
    scope: Optional[ResourceScope],
):
    """Return the branch filter for `column`, or None when no filter applies."""
    if scope is ResourceScope.branch:
        if branch_office_id:
            return column == branch_office_id
        return column.is_not(None)
    if scope is ResourceScope.organization:
        return column.is_(None)
    if scope is None and branch_office_id:
        return or_(column == branch_office_id, column.is_(None))
    return None


def matches_scope(
    value: Optional[str],
    branch_office_id: Optional[str],
    scope: Optional[ResourceScope],
) -> bool:
    """In-memory twin of branch_scope_clause for a single row's branch_office_id."""
    if scope is ResourceScope.branch:
        if branch_office_id:
            return value == branch_office_id
        return value is not None
    if scope is ResourceScope.organization:
        return value is None
    if scope is None and branch_office_id:
        return value == branch_office_id or value is None
    return True


def build_scope_query(stmt: Select, model: Any, params: ScopeParams) -> Select:
    """Restrict `stmt` to the organization, then apply the branch rules."""
    stmt = stmt.where(model.organization_id == params.organization_id)
    clause = branch_scope_clause(model.branch_office_id, params.branch_office_id, params.scope)
    if clause is not None:
        stmt = stmt.where(clause)
    return stmt


def ensure_visible(principal: Principal, resource: Any) -> None:
    """Raise NotFoundError unless the principal's default scope includes the row."""
    params = ScopeParams.for_principal(principal)
    if resource.organization_id != principal.organization_id or not matches_scope(
        resource.branch_office_id, params.branch_office_id, params.scope
    ):
        raise NotFoundError()


def ensure_writable(principal: Principal, resource: Any) -> None:
    """
    org_admins may modify any row of their organization. Branch members may
    only modify rows owned by their own branch.
    """
    ensure_visible(principal, resource)
    if principal.is_org_admin:
        return
    if resource.branch_office_id != principal.require_branch():
        raise PermissionDeniedError(
            "Only organization admins can modify organization-wide records"
        )


async def get_branch_office(
    db: AsyncSession, organization_id: str, branch_office_id: str
) -> BranchOffice:
    """Load a branch office, treating other organizations' branches as missing."""
    office = await db.get(BranchOffice, branch_office_id)
    if office is None or office.organization_id != organization_id:
        raise InvalidInputError("Selected branch office does not belong to this organization")
    return office


async def resolve_write_branch(
    db: AsyncSession,
    principal: Principal,
    scope: Optional[ResourceScope] = None,
    branch_office_id: Optional[str] = None,
) -> Optional[str]:
    """
    Branch assignment for a new or re-scoped row.

    Branch members always write into their own branch; any supplied value is
    ignored. org_admins write organization-wide unless they pick a target
    branch, and scope=branch requires one.
    """
    if principal.is_branch_member:
        return principal.require_branch()
    if scope is ResourceScope.organization:
        return None
    if scope is ResourceScope.branch and not branch_office_id:
        raise InvalidInputError("Select a branch office for branch-scoped records")
    if branch_office_id:
        await get_branch_office(db, principal.organization_id, branch_office_id)
        return branch_office_id
    return None
