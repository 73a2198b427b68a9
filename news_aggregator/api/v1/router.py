from fastapi import APIRouter

from .endpoints import auth, health, news, preferences

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(auth.router, prefix="/users", tags=["auth"])
api_router.include_router(preferences.router, prefix="/users/preferences", tags=["preferences"])

# Personalized news, search, cache control and reading lists - Mounts at /news
api_router.include_router(news.router, prefix="/news", tags=["news"])
