from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from app.dependencies import get_assistant, get_current_user_id, get_db, get_registered_user_id
from app.errors import ai_http_error
from app.v1.schemas import (
    CoverLetterCreate,
    CoverLetterUpdate,
    CoverLetterWizardRequest,
    GenerateCoverLetterRequest,
)
from cvbooster_core.ai import CareerAssistant
from cvbooster_core.exceptions import AIServiceError
from cvbooster_core.models import DocumentStatus
from cvbooster_core.server import PostgreSQLManager

router = APIRouter()

LETTER_NOT_FOUND = "Cover letter not found"


@router.get("/cover-letters")
async def list_cover_letters(
    user_id: str = Depends(get_current_user_id),
    db: PostgreSQLManager = Depends(get_db),
):
    try:
        letters = await db.get_user_cover_letters(user_id)
        return {"status": "success", "message": "Cover letters retrieved", "data": letters}
    except Exception as e:
        logger.error(f"Error fetching cover letters for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch cover letters")


# Generate from CV - RESTful: POST /api/cover-letters/generate-from-cv
@router.post("/cover-letters/generate-from-cv", status_code=201)
async def generate_from_cv(
    body: GenerateCoverLetterRequest,
    user_id: str = Depends(get_registered_user_id),
    db: PostgreSQLManager = Depends(get_db),
    assistant: CareerAssistant = Depends(get_assistant),
):
    """Write a new draft cover letter from one of the caller's CVs"""
    try:
        cv = await db.get_cv(body.cv_id, user_id)
        if not cv:
            raise HTTPException(status_code=404, detail="CV not found")

        content = await assistant.generate_cover_letter(
            cv.content,
            body.company_name,
            body.position,
            body.job_description,
            body.sector,
        )
        letter = await db.create_cover_letter(user_id, {
            "title": f"Lettre - {body.company_name}",
            "content": content,
            "company_name": body.company_name,
            "position": body.position,
            "sector": body.sector,
            "status": DocumentStatus.DRAFT.value,
        })
        logger.info(f"Cover letter {letter.id} generated from CV {cv.id}")
        return {"status": "success", "message": "Cover letter generated", "data": letter}
    except HTTPException:
        raise
    except AIServiceError as e:
        raise ai_http_error(e)
    except Exception as e:
        logger.error(f"Error generating cover letter for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate cover letter")


# Generate from profile - RESTful: POST /api/cover-letters/generate
@router.post("/cover-letters/generate")
async def generate_cover_letter(
    body: CoverLetterWizardRequest,
    user_id: str = Depends(get_registered_user_id),
    db: PostgreSQLManager = Depends(get_db),
    assistant: CareerAssistant = Depends(get_assistant),
):
    """Write a cover letter from the generator form, without a stored CV"""
    if body.missing_required():
        raise HTTPException(status_code=400, detail="Nom de l'entreprise et poste requis")

    company_name = body.company_name.strip()
    position = body.position.strip()
    try:
        content = await assistant.write_cover_letter(
            company_name,
            position,
            body.sector,
            body.personal_info.model_dump() if body.personal_info else None,
            [e.model_dump() for e in body.experience],
            body.motivations,
        )
        letter = None
        if body.save:
            letter = await db.create_cover_letter(user_id, {
                "title": f"Lettre - {company_name}",
                "content": content,
                "company_name": company_name,
                "position": position,
                "sector": body.sector,
                "status": DocumentStatus.DRAFT.value,
            })
        return {
            "status": "success",
            "message": "Lettre de motivation générée avec succès par l'IA",
            "data": {
                "content": content,
                "company_name": company_name,
                "position": position,
                "sector": body.sector,
                "letter": letter,
            },
        }
    except AIServiceError as e:
        raise ai_http_error(e)
    except Exception as e:
        logger.error(f"Error generating cover letter for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Erreur lors de la génération de la lettre")


@router.get("/cover-letters/{letter_id}")
async def get_cover_letter(
    letter_id: str,
    user_id: str = Depends(get_current_user_id),
    db: PostgreSQLManager = Depends(get_db),
):
    try:
        letter = await db.get_cover_letter(letter_id, user_id)
        if not letter:
            raise HTTPException(status_code=404, detail=LETTER_NOT_FOUND)
        return {"status": "success", "message": "Cover letter retrieved", "data": letter}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching cover letter {letter_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch cover letter")


@router.post("/cover-letters", status_code=201)
async def create_cover_letter(
    body: CoverLetterCreate,
    user_id: str = Depends(get_registered_user_id),
    db: PostgreSQLManager = Depends(get_db),
):
    try:
        letter = await db.create_cover_letter(user_id, body.model_dump())
        return {"status": "success", "message": "Cover letter created", "data": letter}
    except Exception as e:
        logger.error(f"Error creating cover letter for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to create cover letter")


@router.put("/cover-letters/{letter_id}")
async def update_cover_letter(
    letter_id: str,
    body: CoverLetterUpdate,
    user_id: str = Depends(get_current_user_id),
    db: PostgreSQLManager = Depends(get_db),
):
    try:
        letter = await db.update_cover_letter(letter_id, user_id, body.changes())
        if not letter:
            raise HTTPException(status_code=404, detail=LETTER_NOT_FOUND)
        return {"status": "success", "message": "Cover letter updated", "data": letter}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating cover letter {letter_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update cover letter")


@router.delete("/cover-letters/{letter_id}")
async def delete_cover_letter(
    letter_id: str,
    user_id: str = Depends(get_current_user_id),
    db: PostgreSQLManager = Depends(get_db),
):
    try:
        if not await db.delete_cover_letter(letter_id, user_id):
            raise HTTPException(status_code=404, detail=LETTER_NOT_FOUND)
        return {"status": "success", "message": "Cover letter deleted", "data": {"id": letter_id}}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting cover letter {letter_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete cover letter")


@router.post("/cover-letters/{letter_id}/analyze")
async def analyze_cover_letter(
    letter_id: str,
    user_id: str = Depends(get_current_user_id),
    db: PostgreSQLManager = Depends(get_db),
    assistant: CareerAssistant = Depends(get_assistant),
):
    try:
        letter = await db.get_cover_letter(letter_id, user_id)
        if not letter:
            raise HTTPException(status_code=404, detail=LETTER_NOT_FOUND)

        analysis = await assistant.analyze_cover_letter(
            letter.content,
            company_name=letter.company_name,
            position=letter.position,
            sector=letter.sector,
        )
        updated = await db.update_cover_letter(letter_id, user_id, {
            "score": analysis["score"],
            "suggestions": analysis["suggestions"],
            "status": DocumentStatus.OPTIMIZED.value,
        })
        return {
            "status": "success",
            "message": "Cover letter analyzed",
            "data": {"letter": updated, "analysis": analysis},
        }
    except HTTPException:
        raise
    except AIServiceError as e:
        raise ai_http_error(e)
    except Exception as e:
        logger.error(f"Error analyzing cover letter {letter_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to analyze cover letter")
