from fastapi import APIRouter

from cofounder.api.routes import billing, chat, health, ideas, reviews, roadmaps, tracking

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(chat.router, prefix="/chat", tags=["chat"])
api_router.include_router(ideas.router, prefix="/ideas", tags=["ideas"])
api_router.include_router(roadmaps.router, prefix="/roadmaps", tags=["roadmaps"])
api_router.include_router(reviews.router, tags=["reviews"])
api_router.include_router(billing.router, tags=["billing"])
api_router.include_router(tracking.router, tags=["tracking"])
