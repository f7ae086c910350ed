from fastapi import HTTPException
from loguru import logger

from cvbooster_core.exceptions import AIServiceError

# AI failures the caller can fix by waiting
_RETRYABLE_CODES = {"rate_limit", "quota_exceeded"}


def ai_http_error(error: AIServiceError) -> HTTPException:
    """Map an AI service failure to the HTTP error sent to the client"""
    status_code = 429 if error.code in _RETRYABLE_CODES else 500
    logger.error(f"AI service error ({error.code}): {error}")
    return HTTPException(status_code=status_code, detail={"error": str(error), "code": error.code})
