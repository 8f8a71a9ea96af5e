from fastapi import APIRouter

from app.api import coupons, coverage, pricing, refunds

api_router = APIRouter()

api_router.include_router(pricing.router)
api_router.include_router(coupons.router)
api_router.include_router(refunds.router)
api_router.include_router(coverage.router)
