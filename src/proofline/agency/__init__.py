"""Agency-facing operations on owned projects."""

from proofline.review.tokens import grant_stakeholder_access, list_project_stakeholders

from .service import (
    add_agency_comment,
    create_project,
    get_project,
    list_projects,
    owns_project,
    project_summary,
    update_project_status,
    upload_asset,
)

__all__ = [
    "create_project",
    "list_projects",
    "get_project",
    "owns_project",
    "update_project_status",
    "upload_asset",
    "add_agency_comment",
    "grant_stakeholder_access",
    "list_project_stakeholders",
    "project_summary",
]
