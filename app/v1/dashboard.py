"""
Dashboard counters over the caller's documents
"""

import asyncio
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Sequence, Union

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from app.dependencies import get_current_user_id, get_db
from cvbooster_core.models import CoverLetter, Cv
from cvbooster_core.server import PostgreSQLManager

router = APIRouter()


def document_stats(documents: Sequence[Union[Cv, CoverLetter]]) -> Dict[str, Any]:
    """Count, average score (rounded half up) and number of stored suggestions"""
    if not documents:
        return {"documents": 0, "average_score": 0, "total_suggestions": 0}
    total_score = sum(doc.score or 0 for doc in documents)
    average = (Decimal(total_score) / len(documents)).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    suggestions = sum(len(doc.suggestions) for doc in documents if isinstance(doc.suggestions, list))
    return {
        "documents": len(documents),
        "average_score": int(average),
        "total_suggestions": suggestions,
    }


@router.get("/dashboard/stats")
async def dashboard_stats(
    user_id: str = Depends(get_current_user_id),
    db: PostgreSQLManager = Depends(get_db),
):
    try:
        cvs, letters, conversations = await asyncio.gather(
            db.get_user_cvs(user_id),
            db.get_user_cover_letters(user_id),
            db.get_user_conversations(user_id),
        )
    except Exception as e:
        logger.error(f"Error fetching dashboard stats for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch dashboard stats")

    stats = document_stats([*cvs, *letters])
    stats.update({
        "cv_count": len(cvs),
        "cover_letter_count": len(letters),
        "conversation_count": len(conversations),
    })
    return {"status": "success", "message": "Dashboard stats retrieved", "data": stats}
