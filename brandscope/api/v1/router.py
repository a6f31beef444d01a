from fastapi import APIRouter

from brandscope.api.v1.analysis import router as analysis_router

api_v1_router = APIRouter(prefix="/api/v1")
api_v1_router.include_router(analysis_router)
