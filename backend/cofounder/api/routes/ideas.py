"""Idea API endpoints.

POST /api/ideas                 - Create a draft idea
GET  /api/ideas                 - List ideas, newest first
POST /api/ideas/{id}/validate   - Run a validation pass (draft -> validating -> validated)
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from cofounder.core.auth import AuthUser, require_auth, require_subscription
from cofounder.db.base import session_scope
from cofounder.schemas.ideas import IdeaCreateRequest, IdeaResponse
from cofounder.services.chat_service import ChatService
from cofounder.services.idea_service import IdeaService
from cofounder.services.llm_gateway import LLMGatewayClient, get_llm_gateway

router = APIRouter()


@router.post("", response_model=IdeaResponse, status_code=201)
async def create_idea(
    request: IdeaCreateRequest,
    user: AuthUser = Depends(require_auth),
) -> IdeaResponse:
    async with session_scope() as session:
        idea = await IdeaService().create_idea(session, user.user_id, **request.model_dump())
        return IdeaResponse.model_validate(idea)


@router.get("", response_model=list[IdeaResponse])
async def list_ideas(user: AuthUser = Depends(require_auth)) -> list[IdeaResponse]:
    async with session_scope() as session:
        ideas = await IdeaService().list_ideas(session, user.user_id)
        return [IdeaResponse.model_validate(idea) for idea in ideas]


@router.post("/{idea_id}/validate", response_model=IdeaResponse)
async def validate_idea(
    idea_id: UUID,
    user: AuthUser = Depends(require_subscription),
    gateway: LLMGatewayClient = Depends(get_llm_gateway),
) -> IdeaResponse:
    """Validate an idea and store its score (0-100, or null if the model gave none).

    On a gateway failure the idea goes back to draft and the gateway status is returned.
    """
    service = IdeaService(ChatService(gateway))
    async with session_scope() as session:
        idea = await service.validate_idea(session, user.user_id, idea_id)
        if idea is None:
            raise HTTPException(status_code=404, detail="Idea not found")
        return IdeaResponse.model_validate(idea)
