from fastapi import APIRouter, Depends, HTTPException, Response
from loguru import logger

from app.dependencies import (
    get_assistant,
    get_current_user_id,
    get_db,
    get_registered_user_id,
    get_server,
)
from app.errors import ai_http_error
from app.v1.schemas import AdvancedAnalysisRequest, CvCreate, CvUpdate, CvWizardRequest
from cvbooster_core.ai import CareerAssistant
from cvbooster_core.exceptions import AIServiceError
from cvbooster_core.export import ExportFormat, aexport_document
from cvbooster_core.models import DocumentStatus
from cvbooster_core.server import CVBoosterServer, PostgreSQLManager

router = APIRouter()

CV_NOT_FOUND = "CV not found"
WIZARD_REQUIRED_FIELDS = (
    "Veuillez remplir tous les champs obligatoires : prénom, nom, "
    "secteur d'activité et poste visé."
)


# List CVs - RESTful: GET /api/cvs
@router.get("/cvs")
async def list_cvs(
    user_id: str = Depends(get_current_user_id),
    db: PostgreSQLManager = Depends(get_db),
):
    """List the caller's CVs, most recently updated first"""
    try:
        cvs = await db.get_user_cvs(user_id)
        return {"status": "success", "message": "CVs retrieved", "data": cvs}
    except Exception as e:
        logger.error(f"Error fetching CVs for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch CVs")


# Generate CV from the wizard - RESTful: POST /api/cvs/generate
@router.post("/cvs/generate")
async def generate_cv(
    body: CvWizardRequest,
    user_id: str = Depends(get_registered_user_id),
    db: PostgreSQLManager = Depends(get_db),
    assistant: CareerAssistant = Depends(get_assistant),
):
    """Turn the CV wizard answers into résumé prose, optionally saved as a draft"""
    if body.missing_required():
        raise HTTPException(status_code=400, detail=WIZARD_REQUIRED_FIELDS)

    info = body.personal_info
    try:
        content = await assistant.generate_cv(
            info.model_dump(),
            body.sector.strip(),
            body.target_position.strip(),
            [e.model_dump() for e in body.experiences],
            [e.model_dump() for e in body.education],
            body.skills,
            body.languages,
            body.certifications,
        )
        cv = None
        if body.save:
            cv = await db.create_cv(user_id, {
                "title": f"CV - {info.first_name.strip()} {info.last_name.strip()}",
                "content": content,
                "sector": body.sector.strip(),
                "position": body.target_position.strip(),
                "status": DocumentStatus.DRAFT.value,
            })
            logger.info(f"CV {cv.id} generated from the wizard for user {user_id}")
        return {
            "status": "success",
            "message": "CV généré avec succès par l'IA",
            "data": {
                "content": content,
                "sector": body.sector,
                "target_position": body.target_position,
                "cv": cv,
            },
        }
    except AIServiceError as e:
        raise ai_http_error(e)
    except Exception as e:
        logger.error(f"Error generating CV for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Erreur lors de la génération du CV")


@router.post("/cvs/analyze-advanced")
async def analyze_cv_advanced(
    body: AdvancedAnalysisRequest,
    user_id: str = Depends(get_current_user_id),
    db: PostgreSQLManager = Depends(get_db),
    assistant: CareerAssistant = Depends(get_assistant),
):
    """Detailed AI review; the improvements become the CV's stored suggestions"""
    if not body.cv_id:
        raise HTTPException(status_code=400, detail="ID du CV requis")
    try:
        cv = await db.get_cv(body.cv_id, user_id)
        if not cv:
            raise HTTPException(status_code=404, detail=CV_NOT_FOUND)

        analysis = await assistant.analyze_cv_advanced(
            cv.content,
            body.target_sector or cv.sector,
            body.target_position or cv.position,
        )
        updated = await db.update_cv(cv.id, user_id, {
            "score": analysis["score"],
            "suggestions": analysis["improvements"],
            "status": DocumentStatus.OPTIMIZED.value,
        })
        return {
            "status": "success",
            "message": "CV analyzed",
            "data": {"cv": updated, "analysis": analysis},
        }
    except HTTPException:
        raise
    except AIServiceError as e:
        raise ai_http_error(e)
    except Exception as e:
        logger.error(f"Error in advanced analysis of CV {body.cv_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to analyze CV")


@router.get("/cvs/{cv_id}")
async def get_cv(
    cv_id: str,
    user_id: str = Depends(get_current_user_id),
    db: PostgreSQLManager = Depends(get_db),
):
    try:
        cv = await db.get_cv(cv_id, user_id)
        if not cv:
            raise HTTPException(status_code=404, detail=CV_NOT_FOUND)
        return {"status": "success", "message": "CV retrieved", "data": cv}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching CV {cv_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch CV")


@router.post("/cvs", status_code=201)
async def create_cv(
    body: CvCreate,
    user_id: str = Depends(get_registered_user_id),
    db: PostgreSQLManager = Depends(get_db),
):
    try:
        cv = await db.create_cv(user_id, body.model_dump())
        logger.info(f"CV {cv.id} created for user {user_id}")
        return {"status": "success", "message": "CV created", "data": cv}
    except Exception as e:
        logger.error(f"Error creating CV for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to create CV")


@router.put("/cvs/{cv_id}")
async def update_cv(
    cv_id: str,
    body: CvUpdate,
    user_id: str = Depends(get_current_user_id),
    db: PostgreSQLManager = Depends(get_db),
):
    try:
        cv = await db.update_cv(cv_id, user_id, body.changes())
        if not cv:
            raise HTTPException(status_code=404, detail=CV_NOT_FOUND)
        return {"status": "success", "message": "CV updated", "data": cv}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating CV {cv_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update CV")


@router.delete("/cvs/{cv_id}")
async def delete_cv(
    cv_id: str,
    user_id: str = Depends(get_current_user_id),
    db: PostgreSQLManager = Depends(get_db),
):
    try:
        if not await db.delete_cv(cv_id, user_id):
            raise HTTPException(status_code=404, detail=CV_NOT_FOUND)
        return {"status": "success", "message": "CV deleted", "data": {"id": cv_id}}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting CV {cv_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete CV")


@router.post("/cvs/{cv_id}/analyze")
async def analyze_cv(
    cv_id: str,
    user_id: str = Depends(get_current_user_id),
    db: PostgreSQLManager = Depends(get_db),
    assistant: CareerAssistant = Depends(get_assistant),
):
    """Score the CV with the AI assistant and store the suggestions"""
    try:
        cv = await db.get_cv(cv_id, user_id)
        if not cv:
            raise HTTPException(status_code=404, detail=CV_NOT_FOUND)

        analysis = await assistant.analyze_cv(cv.content, cv.sector, cv.position)
        updated = await db.update_cv(cv_id, user_id, {
            "score": analysis["score"],
            "suggestions": analysis["suggestions"],
            "status": DocumentStatus.OPTIMIZED.value,
        })
        return {
            "status": "success",
            "message": "CV analyzed",
            "data": {"cv": updated, "analysis": analysis},
        }
    except HTTPException:
        raise
    except AIServiceError as e:
        raise ai_http_error(e)
    except Exception as e:
        logger.error(f"Error analyzing CV {cv_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to analyze CV")


# Export CV - RESTful: GET /api/cvs/{id}/export/{txt|pdf|docx}
@router.get("/cvs/{cv_id}/export/{fmt}")
async def export_cv(
    cv_id: str,
    fmt: ExportFormat,
    user_id: str = Depends(get_current_user_id),
    db: PostgreSQLManager = Depends(get_db),
    server: CVBoosterServer = Depends(get_server),
):
    """Download the CV as an ATS-friendly TXT, PDF or DOCX file"""
    try:
        cv = await db.get_cv(cv_id, user_id)
        if not cv:
            raise HTTPException(status_code=404, detail=CV_NOT_FOUND)

        artifact = await aexport_document(cv, fmt, server.export_options.get(fmt.value))
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error exporting CV {cv_id} as {fmt.value}: {e}")
        raise HTTPException(status_code=500, detail="Failed to export CV")

    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={"Content-Disposition": artifact.content_disposition},
    )
