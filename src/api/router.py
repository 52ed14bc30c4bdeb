"""
Main API router.
"""

from fastapi import APIRouter

from .webhooks import webhook_router

router = APIRouter()

# Submission webhooks (order forms, SalesIQ chat widget)
router.include_router(webhook_router, prefix="/api", tags=["webhooks"])
