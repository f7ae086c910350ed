"""
Affiliate program routes

Click tracking always answers 200: a failure there must never break the
landing page that fired it.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Request, Response
from loguru import logger

from app.dependencies import (
    get_affiliate_service,
    get_client_ip,
    get_config,
    get_current_user_id,
    get_optional_user_id,
    get_registered_user_id,
)
from app.v1.schemas import ConversionRequest, TrackClickRequest
from cvbooster_core.affiliate import AffiliateService, ClickOutcome, Visitor

router = APIRouter()

DEFAULT_COOKIE_NAME = "affiliate_ref"


def _cookie_name(config: Dict[str, Any]) -> str:
    return config.get("affiliate", {}).get("cookie_name", DEFAULT_COOKIE_NAME)


@router.get("/code/{code}")
async def validate_code(code: str, service: AffiliateService = Depends(get_affiliate_service)):
    """Public check used by the landing page before remembering a code"""
    valid = await service.validate_code(code)
    return {"status": "success", "message": "Code checked", "data": {"code": code, "valid": valid}}


@router.post("/join")
async def join_program(
    user_id: str = Depends(get_registered_user_id),
    service: AffiliateService = Depends(get_affiliate_service),
):
    try:
        affiliate = await service.join(user_id)
        return {
            "status": "success",
            "message": "Affiliate account ready",
            "data": {
                "affiliate": affiliate,
                "affiliate_link": service.affiliate_link(affiliate),
            },
        }
    except Exception as e:
        logger.error(f"Error joining affiliate program for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to join affiliate program")


@router.post("/track-click")
async def track_click(
    request: Request,
    response: Response,
    body: Optional[TrackClickRequest] = Body(None),
    user_id: Optional[str] = Depends(get_optional_user_id),
    config: Dict[str, Any] = Depends(get_config),
    service: AffiliateService = Depends(get_affiliate_service),
):
    code = (body.ref or "").strip() if body else ""
    cookie_name = _cookie_name(config)

    if not code:
        outcome = ClickOutcome.INVALID
    else:
        visitor = Visitor(await get_client_ip(request), request.headers.get("User-Agent"))
        outcome = await service.track_click(code, visitor, user_id)

    if outcome in (ClickOutcome.RECORDED, ClickOutcome.DUPLICATE):
        response.set_cookie(
            cookie_name,
            code,
            max_age=service.attribution_window,
            httponly=True,
            samesite="lax",
        )
    elif outcome == ClickOutcome.SELF_REFERRAL:
        response.delete_cookie(cookie_name)

    return {
        "status": "success",
        "message": "Click processed",
        "data": {"outcome": outcome.value, "tracked": outcome == ClickOutcome.RECORDED},
    }


@router.get("/dashboard")
async def dashboard(
    user_id: str = Depends(get_current_user_id),
    service: AffiliateService = Depends(get_affiliate_service),
):
    try:
        data = await service.dashboard(user_id)
    except Exception as e:
        logger.error(f"Error building affiliate dashboard for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to load affiliate dashboard")

    if data is None:
        raise HTTPException(status_code=404, detail="Affiliate account not found")
    return {"status": "success", "message": "Dashboard retrieved", "data": data}


# Record conversion - called by billing once a subscription is paid
@router.post("/conversions")
async def record_conversion(
    request: Request,
    response: Response,
    body: ConversionRequest,
    user_id: str = Depends(get_registered_user_id),
    config: Dict[str, Any] = Depends(get_config),
    service: AffiliateService = Depends(get_affiliate_service),
):
    if body.plan not in service.plans:
        raise HTTPException(status_code=400, detail=f"Unknown plan: {body.plan}")

    cookie_name = _cookie_name(config)
    code = body.ref or request.cookies.get(cookie_name)
    referral = await service.record_conversion(user_id, code, body.plan)
    if referral:
        response.delete_cookie(cookie_name)

    return {
        "status": "success",
        "message": "Conversion processed",
        "data": {"attributed": referral is not None, "referral": referral},
    }
