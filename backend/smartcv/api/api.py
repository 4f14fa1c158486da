"""
API Router Aggregator.

Combines the route modules into a single router for the main app.
"""

from fastapi import APIRouter

from smartcv.api.routes import auth, cvs

api_router = APIRouter()

api_router.include_router(
    auth.router,
    tags=["Authentication"],
)

api_router.include_router(
    cvs.router,
    prefix="/cvs",
    tags=["CVs"],
)
