"""
models/__init__.py
------------------
Re-export all models so table creation and migrations can discover every
table via a single import:

    from lexcorp.models import Base
"""

from lexcorp.db.base import Base
from lexcorp.models.agreement import Agreement, AgreementStatus, RiskLevel
from lexcorp.models.invite import BranchInvite, InviteStatus
from lexcorp.models.member import MemberRole, OrganizationMember
from lexcorp.models.organization import BillingPlan, BranchOffice, Organization
from lexcorp.models.project import Project, ProjectStatus
from lexcorp.models.template import Template, TemplateVisibility
from lexcorp.models.user import User
from lexcorp.models.vendor import Vendor

__all__ = [
    "Base",
    "User",
    "Organization",
    "BillingPlan",
    "BranchOffice",
    "OrganizationMember",
    "MemberRole",
    "BranchInvite",
    "InviteStatus",
    "Agreement",
    "AgreementStatus",
    "RiskLevel",
    "Template",
    "TemplateVisibility",
    "Vendor",
    "Project",
    "ProjectStatus",
]
