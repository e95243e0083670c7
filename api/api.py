from fastapi import APIRouter
from api.admin_api import router as admin_router
from api.award_api import router as award_router
from api.me_api import router as me_router


api_router = APIRouter()
api_router.include_router(award_router, tags=["awards"])
api_router.include_router(admin_router, tags=["admin"])
api_router.include_router(me_router, tags=["me"])
