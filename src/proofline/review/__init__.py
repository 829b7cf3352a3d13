"""Guest review: access tokens, approval state, read sessions and feedback."""

from .gateway import submit_feedback
from .rpc import get_project_for_review, submit_client_feedback
from .session import open_review_session
from .state import approval_status_for, decide
from .tokens import (
    build_review_link,
    grant_stakeholder_access,
    list_project_stakeholders,
    mint_access_token,
    resolve_stakeholder,
)

__all__ = [
    "mint_access_token",
    "build_review_link",
    "grant_stakeholder_access",
    "list_project_stakeholders",
    "resolve_stakeholder",
    "open_review_session",
    "submit_feedback",
    "decide",
    "approval_status_for",
    "get_project_for_review",
    "submit_client_feedback",
]
