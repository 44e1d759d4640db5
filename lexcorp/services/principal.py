"""
services/principal.py
---------------------
The request principal: who is acting, in which organization, with which
role and branch. Built once per request from the resolved membership and
passed explicitly into every service call.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from lexcorp.core.exceptions import BranchNotAssignedError, PermissionDeniedError
from lexcorp.models.member import MemberRole, OrganizationMember
from lexcorp.models.user import User

# Navigation views of the web client, by role.
_COMMON_VIEWS = ("dashboard", "generator", "templates", "projects", "analytics", "settings")
_ROLE_VIEWS = {
    MemberRole.org_admin: _COMMON_VIEWS + ("vendors", "offices"),
    MemberRole.branch_admin: _COMMON_VIEWS + ("vendors", "departments"),
    MemberRole.branch_user: _COMMON_VIEWS,
}


@dataclass(frozen=True)
class Principal:
    user_id: str
    email: str
    organization_id: str
    role: MemberRole
    branch_office_id: Optional[str] = None
    department: Optional[str] = None

    @classmethod
    def from_membership(cls, user: User, member: OrganizationMember) -> "Principal":
        return cls(
            user_id=user.id,
            email=user.email,
            organization_id=member.organization_id,
            role=MemberRole(member.role),
            branch_office_id=member.branch_office_id,
            department=member.department,
        )

    @property
    def is_org_admin(self) -> bool:
        return self.role is MemberRole.org_admin

    @property
    def is_branch_admin(self) -> bool:
        return self.role is MemberRole.branch_admin

    @property
    def is_branch_member(self) -> bool:
        return not self.is_org_admin

    @property
    def branch_locked(self) -> bool:
        """Branch role without a branch: may sign in, may not manage resources."""
        return self.is_branch_member and not self.branch_office_id

    @property
    def permitted_views(self) -> Tuple[str, ...]:
        return _ROLE_VIEWS[self.role]

    def require_branch(self) -> str:
        if not self.branch_office_id:
            raise BranchNotAssignedError()
        return self.branch_office_id

    def require_org_admin(self) -> None:
        if not self.is_org_admin:
            raise PermissionDeniedError("Only organization admins can perform this action")

    def require_manager(self) -> None:
        """org_admin, or branch_admin with an assigned branch."""
        if self.is_org_admin:
            return
        if not self.is_branch_admin:
            raise PermissionDeniedError("Only organization or branch admins can perform this action")
        self.require_branch()
