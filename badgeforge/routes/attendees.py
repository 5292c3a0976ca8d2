"""
Attendee Routes
Import, edit and photo endpoints for the record collection
"""

from typing import Dict, Any, List
from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File

from badgeforge.auth import get_current_user
from badgeforge.config import settings
from badgeforge.engine.records import Record
from badgeforge.schemas.attendee import (
    ImportRequest,
    ImportResponse,
    AttendeeListResponse,
    BulkUpdateRequest,
    BulkUpdateResponse,
    DeleteResponse,
    FieldDeleteResponse,
    PhotoUploadResponse,
)
from badgeforge.services.attendee_service import attendee_service
from badgeforge.services.import_service import import_service

router = APIRouter()


@router.post("/import", response_model=ImportResponse)
async def import_attendees(
    request: ImportRequest,
    current_user: dict = Depends(get_current_user)
):
    """
    Import raw spreadsheet text
    
    - **rawText**: CSV/TSV content (header row first)
    - **archetype**: optional archetype forced on every record
    - **customLabels**: renamed labels used as column hints
    - **replace**: replace the collection (default) or merge by registration id
    
    Returns `usedFallback` and a notice when smart column mapping was unavailable.
    """
    return await import_service.import_text(current_user["user_id"], request)


@router.get("", response_model=AttendeeListResponse)
async def list_attendees(current_user: dict = Depends(get_current_user)):
    """List records in source order"""
    attendees = await attendee_service.list_attendees(current_user["user_id"])
    return {"total": len(attendees), "attendees": attendees}


@router.delete("", response_model=DeleteResponse)
async def delete_all_attendees(current_user: dict = Depends(get_current_user)):
    """Clear the collection"""
    deleted = await attendee_service.delete_all(current_user["user_id"])
    return {"deleted": deleted}


@router.patch("/bulk", response_model=BulkUpdateResponse)
async def bulk_update_attendees(
    request: BulkUpdateRequest,
    current_user: dict = Depends(get_current_user)
):
    """Apply one patch to several records"""
    updated = await attendee_service.bulk_update(current_user["user_id"], request.ids, request.data)
    return {"updated": updated}


@router.delete("/fields/{label}", response_model=FieldDeleteResponse)
async def delete_extra_field(
    label: str,
    current_user: dict = Depends(get_current_user)
):
    """Remove a column label from every record's extras"""
    updated = await attendee_service.delete_extra_field(current_user["user_id"], label)
    return {"label": label, "updated": updated}


@router.post("/photos", response_model=PhotoUploadResponse)
async def upload_photos(
    files: List[UploadFile] = File(...),
    current_user: dict = Depends(get_current_user)
):
    """
    Bulk photo upload
    
    Each file is bound to the record whose position equals the first number
    in its filename (photo_5.png -> sixth record).
    """
    payload = []
    for upload in files:
        content = await upload.read()
        if len(content) > settings.MAX_UPLOAD_SIZE:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{upload.filename} exceeds the {settings.MAX_UPLOAD_SIZE} byte upload limit"
            )
        payload.append((upload.filename or "", content))
    
    result = await attendee_service.attach_photos(current_user["user_id"], payload)
    return {"matched": result.matched, "failed": result.failed, "total": len(payload)}


@router.patch("/{attendee_id}", response_model=Record)
async def update_attendee(
    attendee_id: str,
    patch: Dict[str, Any],
    current_user: dict = Depends(get_current_user)
):
    """Patch one record; extras are merged, other fields replaced"""
    return await attendee_service.update_attendee(current_user["user_id"], attendee_id, patch)


@router.delete("/{attendee_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_attendee(
    attendee_id: str,
    current_user: dict = Depends(get_current_user)
):
    """Delete one record"""
    await attendee_service.delete_attendee(current_user["user_id"], attendee_id)
