# src/proofline/web/routes.py
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    Header,
    HTTPException,
    Query,
    UploadFile,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from pydantic import BaseModel, EmailStr

from proofline import agency
from proofline.core.errors import ProoflineError, TransportError
from proofline.models import StakeholderCreate
from proofline.review import open_review_session, resolve_stakeholder, submit_feedback
from proofline.review.rpc import (
    GetProjectForReviewArgs,
    SubmitClientFeedbackArgs,
    get_project_for_review,
    submit_client_feedback,
)
from proofline.review.tokens import parse_uuid
from proofline.web.websocket import authorize_subscription, websocket_manager

# Create the router
router = APIRouter()


class ProjectBody(BaseModel):
    name: str
    client_company: str
    due_date: Optional[date] = None


class StatusBody(BaseModel):
    status: str


class CommentBody(BaseModel):
    author_name: str
    author_email: Optional[EmailStr] = None
    content: str


class FeedbackBody(BaseModel):
    asset_id: str
    stakeholder_id: str
    status: str
    feedback: Optional[str] = None


async def agency_user(x_agency_user: Optional[str] = Header(default=None)) -> UUID:
    """Agency identity forwarded by the identity gateway."""
    user_id = parse_uuid(x_agency_user)
    if user_id is None:
        raise HTTPException(status_code=401, detail="Agency identity required")
    return user_id


# Agency routes
@router.post("/api/projects", status_code=201)
async def create_project(body: ProjectBody, user_id: UUID = Depends(agency_user)):
    project = await agency.create_project(
        user_id, body.name, body.client_company, body.due_date
    )
    return project.model_dump(mode="json")


@router.get("/api/projects")
async def list_projects(user_id: UUID = Depends(agency_user)):
    """All projects of the caller, newest first, with nested review state."""
    projects = await agency.list_projects(user_id)
    return {"projects": [p.model_dump(mode="json") for p in projects]}


@router.get("/api/projects/{project_id}")
async def get_project(project_id: UUID, user_id: UUID = Depends(agency_user)):
    project = await agency.get_project(user_id, project_id)
    return project.model_dump(mode="json")


@router.patch("/api/projects/{project_id}/status")
async def update_project_status(
    project_id: UUID, body: StatusBody, user_id: UUID = Depends(agency_user)
):
    project = await agency.update_project_status(user_id, project_id, body.status)
    return project.model_dump(mode="json")


@router.post("/api/projects/{project_id}/assets", status_code=201)
async def upload_asset(
    project_id: UUID,
    file: UploadFile = File(...),
    name: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    user_id: UUID = Depends(agency_user),
):
    """Upload a file and register it as an asset of the project."""
    data = await file.read()
    asset = await agency.upload_asset(
        user_id,
        project_id,
        filename=file.filename or "",
        content_type=file.content_type,
        data=data,
        name=name,
        description=description,
    )
    return asset.model_dump(mode="json")


@router.post("/api/assets/{asset_id}/comments", status_code=201)
async def add_comment(asset_id: UUID, body: CommentBody, user_id: UUID = Depends(agency_user)):
    comment = await agency.add_agency_comment(
        user_id,
        asset_id,
        author_name=body.author_name,
        author_email=body.author_email,
        content=body.content,
    )
    return comment.model_dump(mode="json")


@router.post("/api/projects/{project_id}/stakeholders", status_code=201)
async def grant_stakeholder(
    project_id: UUID, body: StakeholderCreate, user_id: UUID = Depends(agency_user)
):
    """Create a reviewer grant; the response is the only copy of the token."""
    grant = await agency.grant_stakeholder_access(user_id, project_id, body)
    return grant.model_dump(mode="json")


@router.get("/api/projects/{project_id}/stakeholders")
async def list_stakeholders(project_id: UUID, user_id: UUID = Depends(agency_user)):
    stakeholders = await agency.list_project_stakeholders(user_id, project_id)
    return {"stakeholders": [s.model_dump(mode="json") for s in stakeholders]}


@router.get("/api/summary")
async def summary(user_id: UUID = Depends(agency_user)):
    result = await agency.project_summary(user_id)
    return result.model_dump(mode="json")


# Guest review routes
@router.get("/api/review/{project_id}/{token}")
async def review_session(project_id: str, token: str):
    review = await open_review_session(project_id, token)
    return review.model_dump(mode="json")


@router.post("/api/review/{project_id}/{token}/feedback", status_code=201)
async def review_feedback(project_id: str, token: str, body: FeedbackBody):
    """Submit a comment and/or decision; the token is checked again here."""
    await resolve_stakeholder(project_id, token)
    result = await submit_feedback(
        body.asset_id, body.stakeholder_id, token, body.status, body.feedback
    )
    return result.model_dump(mode="json")


# Remote procedure boundary
@router.post("/rpc/get_project_for_review")
async def rpc_get_project_for_review(args: GetProjectForReviewArgs):
    return await get_project_for_review(args.project_id, args.access_token)


@router.post("/rpc/submit_client_feedback", status_code=204)
async def rpc_submit_client_feedback(args: SubmitClientFeedbackArgs):
    await submit_client_feedback(
        args.asset_id, args.stakeholder_id, args.access_token, args.status, args.feedback
    )


@router.websocket("/ws/changes")
async def websocket_endpoint(
    websocket: WebSocket,
    project_id: Optional[str] = Query(default=None),
    token: Optional[str] = Query(default=None),
    x_agency_user: Optional[str] = Header(default=None),
):
    """Change feed for a guest (project_id + token) or an agency (X-Agency-User)."""
    try:
        subscription = await authorize_subscription(project_id, token, x_agency_user)
    except ProoflineError as e:
        code = (
            status.WS_1011_INTERNAL_ERROR
            if isinstance(e, TransportError)
            else status.WS_1008_POLICY_VIOLATION
        )
        await websocket.close(code=code, reason=e.public_message)
        return

    await websocket_manager.connect(websocket, subscription)
    try:
        # Clients only listen; anything they send is ignored.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        websocket_manager.disconnect(websocket)
