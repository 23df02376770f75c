"""Weekly review and insight API endpoints.

POST /api/reviews   - Generate the review for the previous Sunday-Saturday week
GET  /api/reviews   - Stored reviews, newest week first
GET  /api/insights  - Proactive insights ([] when the model output is unusable)
"""

from fastapi import APIRouter, Depends

from cofounder.core.auth import AuthUser, require_auth, require_subscription
from cofounder.db.base import session_scope
from cofounder.schemas.reviews import Insight, InsightsResponse, WeeklyReviewResponse
from cofounder.services.chat_service import ChatService
from cofounder.services.insights_service import InsightsService
from cofounder.services.llm_gateway import LLMGatewayClient, get_llm_gateway
from cofounder.services.review_service import ReviewService

router = APIRouter()


@router.post("/reviews", response_model=WeeklyReviewResponse, status_code=201)
async def generate_review(
    user: AuthUser = Depends(require_subscription),
    gateway: LLMGatewayClient = Depends(get_llm_gateway),
) -> WeeklyReviewResponse:
    service = ReviewService(ChatService(gateway))
    async with session_scope() as session:
        review = await service.generate_review(session, user.user_id)
        return WeeklyReviewResponse.model_validate(review)


@router.get("/reviews", response_model=list[WeeklyReviewResponse])
async def list_reviews(user: AuthUser = Depends(require_auth)) -> list[WeeklyReviewResponse]:
    async with session_scope() as session:
        reviews = await ReviewService().list_reviews(session, user.user_id)
        return [WeeklyReviewResponse.model_validate(review) for review in reviews]


@router.get("/insights", response_model=InsightsResponse, response_model_exclude_none=True, response_model_by_alias=True)
async def get_insights(
    user: AuthUser = Depends(require_subscription),
    gateway: LLMGatewayClient = Depends(get_llm_gateway),
) -> InsightsResponse:
    async with session_scope() as session:
        insights = await InsightsService(gateway).generate_insights(session, user.user_id)
    return InsightsResponse(insights=[Insight.model_validate(item) for item in insights])
