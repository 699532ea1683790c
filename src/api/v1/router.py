from fastapi import APIRouter
from src.api.v1.endpoints import admin, generation, poems, users


api_router = APIRouter()

api_router.include_router(poems.router, tags=["poems"])
api_router.include_router(generation.router, tags=["generation"])
api_router.include_router(users.router, tags=["settings"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
