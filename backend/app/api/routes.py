from fastapi import APIRouter
from .webhook import router as webhook_router
from .customers import router as customers_router

api_router = APIRouter()
api_router.include_router(webhook_router, prefix="/whatsapp", tags=["whatsapp"])
api_router.include_router(customers_router, prefix="/customers", tags=["customers"])
