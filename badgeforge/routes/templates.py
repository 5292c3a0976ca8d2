"""
Template Routes
Saved layout endpoints: list, save, update and delete
"""

from fastapi import APIRouter, Depends, status

from badgeforge.auth import get_current_user
from badgeforge.schemas.template import (
    SaveTemplateRequest,
    UpdateTemplateRequest,
    SavedTemplateResponse,
    TemplateListResponse,
)
from badgeforge.services.template_service import template_service

router = APIRouter()


@router.get("", response_model=TemplateListResponse)
async def list_templates(current_user: dict = Depends(get_current_user)):
    """Own templates plus public ones, most recently updated first"""
    return await template_service.list_templates(current_user["user_id"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def save_template(
    request: SaveTemplateRequest,
    current_user: dict = Depends(get_current_user)
):
    """
    Save the current design as a template
    
    - **name**: template name (required)
    - **layout**: element key -> position (required)
    - **visibility**: `public` shares with every user, anything else is private
    """
    template_id = await template_service.save_template(current_user["user_id"], request)
    return {"id": template_id}


@router.get("/{template_id}", response_model=SavedTemplateResponse)
async def get_template(
    template_id: str,
    current_user: dict = Depends(get_current_user)
):
    return await template_service.get_template(current_user["user_id"], template_id)


@router.patch("/{template_id}", response_model=SavedTemplateResponse)
async def update_template(
    template_id: str,
    request: UpdateTemplateRequest,
    current_user: dict = Depends(get_current_user)
):
    """Partial update (owner only)"""
    return await template_service.update_template(current_user["user_id"], template_id, request)


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_template(
    template_id: str,
    current_user: dict = Depends(get_current_user)
):
    """Delete a template (owner only)"""
    await template_service.delete_template(current_user["user_id"], template_id)
