"""Decision log and metric endpoints (the records fed into chat context)."""

from fastapi import APIRouter, Depends

from cofounder.core.auth import AuthUser, require_auth
from cofounder.db.base import session_scope
from cofounder.schemas.tracking import (
    DecisionCreateRequest,
    DecisionResponse,
    MetricCreateRequest,
    MetricResponse,
)
from cofounder.services.tracking_service import DecisionService, MetricService

router = APIRouter()


@router.post("/decisions", response_model=DecisionResponse, status_code=201)
async def create_decision(
    request: DecisionCreateRequest,
    user: AuthUser = Depends(require_auth),
) -> DecisionResponse:
    async with session_scope() as session:
        decision = await DecisionService().create_decision(session, user.user_id, **request.model_dump())
        return DecisionResponse.model_validate(decision)


@router.get("/decisions", response_model=list[DecisionResponse])
async def list_decisions(user: AuthUser = Depends(require_auth)) -> list[DecisionResponse]:
    async with session_scope() as session:
        decisions = await DecisionService().list_decisions(session, user.user_id)
        return [DecisionResponse.model_validate(decision) for decision in decisions]


@router.post("/metrics", response_model=MetricResponse, status_code=201)
async def record_metric(
    request: MetricCreateRequest,
    user: AuthUser = Depends(require_auth),
) -> MetricResponse:
    async with session_scope() as session:
        metric = await MetricService().record_metric(session, user.user_id, **request.model_dump())
        return MetricResponse.model_validate(metric)


@router.get("/metrics", response_model=list[MetricResponse])
async def list_metrics(user: AuthUser = Depends(require_auth)) -> list[MetricResponse]:
    async with session_scope() as session:
        metrics = await MetricService().list_metrics(session, user.user_id)
        return [MetricResponse.model_validate(metric) for metric in metrics]
