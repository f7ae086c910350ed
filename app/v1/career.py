from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from app.dependencies import get_assistant, get_current_user_id
from app.errors import ai_http_error
from app.v1.schemas import CareerAdviceRequest
from cvbooster_core.ai import CareerAssistant
from cvbooster_core.exceptions import AIServiceError

router = APIRouter()


# Career advice - RESTful: POST /api/career/advice
@router.post("/career/advice")
async def career_advice(
    body: CareerAdviceRequest,
    user_id: str = Depends(get_current_user_id),
    assistant: CareerAssistant = Depends(get_assistant),
):
    try:
        advice = await assistant.career_advice(
            body.current_sector,
            body.target_sector,
            body.experience,
            body.skills,
            body.goals,
        )
        return {"status": "success", "message": "Conseils générés", "data": advice}
    except AIServiceError as e:
        raise ai_http_error(e)
    except Exception as e:
        logger.error(f"Error generating career advice for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Erreur lors de la génération des conseils")
