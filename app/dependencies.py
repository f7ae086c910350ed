"""
FastAPI dependencies - server components and caller identity
"""

from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request
from loguru import logger

from cvbooster_core.affiliate import AffiliateService
from cvbooster_core.ai import CareerAssistant
from cvbooster_core.server import CVBoosterServer, PostgreSQLManager

DEFAULT_USER_HEADER = "X-User-Id"
DEFAULT_EMAIL_HEADER = "X-User-Email"


def get_server(request: Request) -> CVBoosterServer:
    return request.app.state.server


def get_config(server: CVBoosterServer = Depends(get_server)) -> Dict[str, Any]:
    return server.config


def get_db(server: CVBoosterServer = Depends(get_server)) -> PostgreSQLManager:
    return server.db_manager


def get_affiliate_service(server: CVBoosterServer = Depends(get_server)) -> AffiliateService:
    return server.affiliate_service


def get_assistant(server: CVBoosterServer = Depends(get_server)) -> CareerAssistant:
    return server.assistant


def _auth_settings(config: Dict[str, Any]) -> Dict[str, Any]:
    return config.get("auth", {})


async def get_optional_user_id(
    request: Request,
    config: Dict[str, Any] = Depends(get_config),
) -> Optional[str]:
    """Caller id from the trusted identity header, None for anonymous visitors"""
    header = _auth_settings(config).get("user_header", DEFAULT_USER_HEADER)
    user_id = request.headers.get(header, "").strip()
    return user_id or None


async def get_current_user_id(user_id: Optional[str] = Depends(get_optional_user_id)) -> str:
    """Caller id; 401 when the identity header is missing"""
    if not user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user_id


async def get_registered_user_id(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    config: Dict[str, Any] = Depends(get_config),
    db: PostgreSQLManager = Depends(get_db),
) -> str:
    """Caller id, making sure the user row exists before anything references it"""
    email_header = _auth_settings(config).get("email_header", DEFAULT_EMAIL_HEADER)
    email = request.headers.get(email_header) or None
    try:
        await db.upsert_user(user_id, email=email)
    except Exception as e:
        logger.error(f"Failed to register user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
    return user_id


async def get_client_ip(request: Request) -> Optional[str]:
    """Extract client IP from request headers"""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        client_ip = forwarded_for.split(",")[0].strip()
    else:
        client_ip = request.client.host if request.client else None
    return client_ip
