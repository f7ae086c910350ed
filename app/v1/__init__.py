"""
V1 API - CV, cover letter, conversation, upload, career, dashboard and affiliate routes
"""

from fastapi import APIRouter

from . import affiliate, career, conversations, cover_letters, cvs, dashboard, uploads

router = APIRouter()
router.include_router(cvs.router, tags=["CVs"])
router.include_router(cover_letters.router, tags=["Cover Letters"])
router.include_router(conversations.router, tags=["Conversations"])
router.include_router(uploads.router, tags=["Uploads"])
router.include_router(career.router, tags=["Career"])
router.include_router(dashboard.router, tags=["Dashboard"])
router.include_router(affiliate.router, prefix="/affiliate", tags=["Affiliate"])

__all__ = ["router"]
