"""Roadmap API endpoints.

POST  /api/roadmaps                      - Generate the MVP roadmap for an idea
GET   /api/roadmaps/{idea_id}            - Roadmap with ordered steps and progress
PATCH /api/roadmaps/steps/{step_id}/toggle - Flip a step's completion
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from cofounder.core.auth import AuthUser, require_auth, require_subscription
from cofounder.core.exceptions import RoadmapExistsError
from cofounder.db.base import session_scope
from cofounder.db.models.roadmap import Roadmap
from cofounder.schemas.ideas import GenerateRoadmapRequest, RoadmapResponse, RoadmapStepResponse
from cofounder.services.chat_service import ChatService
from cofounder.services.llm_gateway import LLMGatewayClient, get_llm_gateway
from cofounder.services.roadmap_service import RoadmapService, compute_progress

router = APIRouter()


def _to_response(roadmap: Roadmap) -> RoadmapResponse:
    """Convert ORM instance (steps loaded) to response schema."""
    return RoadmapResponse(
        id=roadmap.id,
        idea_id=roadmap.idea_id,
        mvp_scope=roadmap.mvp_scope,
        tech_stack=roadmap.tech_stack or [],
        estimated_build_time=roadmap.estimated_build_time,
        first_user_path=roadmap.first_user_path,
        steps=[RoadmapStepResponse.model_validate(step) for step in roadmap.steps],
        progress=compute_progress(roadmap.steps),
        created_at=roadmap.created_at,
    )


@router.post("", response_model=RoadmapResponse, status_code=201)
async def generate_roadmap(
    request: GenerateRoadmapRequest,
    user: AuthUser = Depends(require_subscription),
    gateway: LLMGatewayClient = Depends(get_llm_gateway),
) -> RoadmapResponse:
    service = RoadmapService(ChatService(gateway))
    async with session_scope() as session:
        if await service.get_roadmap(session, user.user_id, request.idea_id) is not None:
            raise HTTPException(status_code=409, detail="Roadmap already exists for this idea")

        try:
            roadmap = await service.generate_roadmap(session, user.user_id, request.idea_id)
        except RoadmapExistsError as exc:
            raise HTTPException(status_code=409, detail="Roadmap already exists for this idea") from exc
        if roadmap is None:
            raise HTTPException(status_code=404, detail="Idea not found")
        return _to_response(roadmap)


@router.patch("/steps/{step_id}/toggle", response_model=RoadmapStepResponse)
async def toggle_step(step_id: UUID, user: AuthUser = Depends(require_auth)) -> RoadmapStepResponse:
    async with session_scope() as session:
        step = await RoadmapService().toggle_step(session, user.user_id, step_id)
        if step is None:
            raise HTTPException(status_code=404, detail="Step not found")
        return RoadmapStepResponse.model_validate(step)


@router.get("/{idea_id}", response_model=RoadmapResponse)
async def get_roadmap(idea_id: UUID, user: AuthUser = Depends(require_auth)) -> RoadmapResponse:
    async with session_scope() as session:
        roadmap = await RoadmapService().get_roadmap(session, user.user_id, idea_id)
        if roadmap is None:
            raise HTTPException(status_code=404, detail="Roadmap not found")
        return _to_response(roadmap)
