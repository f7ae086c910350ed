from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from loguru import logger

from app.dependencies import get_client_ip, get_db, get_registered_user_id, get_server
from cvbooster_core.exceptions import UnsupportedFileTypeError
from cvbooster_core.extraction import MAX_UPLOAD_SIZE, aextract_text, validate_upload
from cvbooster_core.models import DocumentStatus
from cvbooster_core.server import CVBoosterServer, PostgreSQLManager

router = APIRouter()


async def _read_upload(request: Request, file: UploadFile, server: CVBoosterServer, user_id: str) -> str:
    """Validate the upload and return its extracted text"""
    client_ip = await get_client_ip(request)
    logger.info(f"Upload request - user_id: {user_id} - client_ip: {client_ip} - file: {file.filename}")

    file_content = await file.read()
    valid, message = validate_upload(
        file_content,
        file.filename,
        file.content_type,
        server.upload_max_size or MAX_UPLOAD_SIZE,
    )
    if not valid:
        raise HTTPException(status_code=400, detail=message)

    try:
        return await aextract_text(file_content, file.filename, file.content_type)
    except UnsupportedFileTypeError as e:
        raise HTTPException(status_code=400, detail=str(e))


# Upload CV - RESTful: POST /api/upload/cv
@router.post("/upload/cv", status_code=201)
async def upload_cv(
    request: Request,
    file: UploadFile = File(...),
    title: Optional[str] = Form(None),
    sector: Optional[str] = Form(None),
    position: Optional[str] = Form(None),
    user_id: str = Depends(get_registered_user_id),
    db: PostgreSQLManager = Depends(get_db),
    server: CVBoosterServer = Depends(get_server),
):
    """Create a draft CV from an uploaded PDF, Word or text file"""
    try:
        content = await _read_upload(request, file, server, user_id)
        cv = await db.create_cv(user_id, {
            "title": title or file.filename,
            "content": content,
            "sector": sector,
            "position": position,
            "status": DocumentStatus.DRAFT.value,
        })
        logger.info(f"CV {cv.id} created from upload {file.filename}")
        return {"status": "success", "message": "CV uploadé avec succès", "data": cv}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error uploading CV: {e}")
        raise HTTPException(status_code=500, detail="Erreur lors de l'upload du CV")


# Upload cover letter - RESTful: POST /api/upload/cover-letter
@router.post("/upload/cover-letter", status_code=201)
async def upload_cover_letter(
    request: Request,
    file: UploadFile = File(...),
    title: Optional[str] = Form(None),
    company_name: Optional[str] = Form(None, alias="companyName"),
    position: Optional[str] = Form(None),
    sector: Optional[str] = Form(None),
    user_id: str = Depends(get_registered_user_id),
    db: PostgreSQLManager = Depends(get_db),
    server: CVBoosterServer = Depends(get_server),
):
    try:
        content = await _read_upload(request, file, server, user_id)
        letter = await db.create_cover_letter(user_id, {
            "title": title or file.filename,
            "content": content,
            "company_name": company_name,
            "position": position,
            "sector": sector,
            "status": DocumentStatus.DRAFT.value,
        })
        return {"status": "success", "message": "Lettre uploadée avec succès", "data": letter}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error uploading cover letter: {e}")
        raise HTTPException(status_code=500, detail="Erreur lors de l'upload de la lettre")
