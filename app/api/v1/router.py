from fastapi import APIRouter

from app.api.v1 import frames, images, traits


api_router = APIRouter(prefix="/v1")

api_router.include_router(frames.router)
api_router.include_router(images.router)
api_router.include_router(traits.router)
