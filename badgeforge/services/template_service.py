"""
Template Service
Business logic for saved card layouts: per-user storage with public sharing
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional
from fastapi import HTTPException, status

from badgeforge.database import database
from badgeforge.schemas.template import SaveTemplateRequest, UpdateTemplateRequest, SavedTemplateResponse

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _dump_layout(layout) -> Optional[str]:
    if layout is None:
        return None
    return json.dumps({
        key: position.model_dump(by_alias=True, exclude_none=True)
        for key, position in layout.items()
    })


def _dump(value) -> Optional[str]:
    if value is None:
        return None
    if hasattr(value, "model_dump"):
        value = value.model_dump(by_alias=True)
    return json.dumps(value)


class TemplateService:
    """Service for saved template operations"""
    
    @staticmethod
    async def list_templates(user_id: str) -> dict:
        """
        Templates the user owns plus every public template, most recently
        updated first. Each carries `is_owner` for the caller.
        """
        try:
            rows = await database.fetch_all(
                """
                SELECT * FROM saved_templates
                WHERE owner_id = :user_id OR visibility = 'public'
                ORDER BY updated_at DESC
                """,
                {"user_id": user_id}
            )
        except Exception as e:
            logger.error("Failed to list templates: %s", e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to list templates: {str(e)}"
            )
        
        templates: List[SavedTemplateResponse] = []
        for row in rows:
            data = dict(row)
            data["is_owner"] = data["owner_id"] == user_id
            templates.append(SavedTemplateResponse.model_validate(data))
        
        return {"total": len(templates), "templates": templates}
    
    @staticmethod
    async def get_template(user_id: str, template_id: str) -> SavedTemplateResponse:
        """Get a template the user owns or that is public"""
        
        row = await database.fetch_one(
            """
            SELECT * FROM saved_templates
            WHERE id = :template_id AND (owner_id = :user_id OR visibility = 'public')
            """,
            {"template_id": template_id, "user_id": user_id}
        )
        
        if not row:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Template not found"
            )
        
        data = dict(row)
        data["is_owner"] = data["owner_id"] == user_id
        return SavedTemplateResponse.model_validate(data)
    
    @staticmethod
    async def save_template(user_id: str, data: SaveTemplateRequest) -> str:
        """Store a new template owned by the user and return its id"""
        
        template_id = f"tpl-{uuid.uuid4().hex}"
        timestamp = _now()
        
        try:
            await database.execute(
                """
                INSERT INTO saved_templates
                (id, owner_id, name, icon, base_template, visibility, layout,
                 element_counters, theme, custom_labels, created_at, updated_at)
                VALUES (:id, :owner_id, :name, :icon, :base_template, :visibility, :layout,
                        :element_counters, :theme, :custom_labels, :created_at, :updated_at)
                """,
                {
                    "id": template_id,
                    "owner_id": user_id,
                    "name": data.name,
                    "icon": data.icon or "default",
                    "base_template": data.base_template.value,
                    "visibility": data.visibility,
                    "layout": _dump_layout(data.layout),
                    "element_counters": _dump(data.element_counters),
                    "theme": _dump(data.theme),
                    "custom_labels": _dump(data.custom_labels or {}),
                    "created_at": timestamp,
                    "updated_at": timestamp,
                }
            )
        except Exception as e:
            logger.error("Failed to save template '%s': %s", data.name, e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to save template: {str(e)}"
            )
        
        logger.info("Saved template %s for user %s", template_id, user_id)
        return template_id
    
    @staticmethod
    async def _require_owned(user_id: str, template_id: str) -> dict:
        row = await database.fetch_one(
            "SELECT * FROM saved_templates WHERE id = :template_id AND owner_id = :user_id",
            {"template_id": template_id, "user_id": user_id}
        )
        
        # Foreign templates look the same as missing ones
        if not row:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Template not found"
            )
        return dict(row)
    
    @staticmethod
    async def update_template(user_id: str, template_id: str, data: UpdateTemplateRequest) -> SavedTemplateResponse:
        """Partial update; only fields present in the request change"""
        
        await TemplateService._require_owned(user_id, template_id)
        
        try:
            await database.execute(
                """
                UPDATE saved_templates SET
                    name = COALESCE(:name, name),
                    icon = COALESCE(:icon, icon),
                    visibility = COALESCE(:visibility, visibility),
                    layout = COALESCE(:layout, layout),
                    element_counters = COALESCE(:element_counters, element_counters),
                    theme = COALESCE(:theme, theme),
                    custom_labels = COALESCE(:custom_labels, custom_labels),
                    updated_at = :updated_at
                WHERE id = :template_id AND owner_id = :user_id
                """,
                {
                    "template_id": template_id,
                    "user_id": user_id,
                    "name": data.name,
                    "icon": data.icon,
                    "visibility": data.visibility,
                    "layout": _dump_layout(data.layout),
                    "element_counters": _dump(data.element_counters),
                    "theme": _dump(data.theme),
                    "custom_labels": _dump(data.custom_labels),
                    "updated_at": _now(),
                }
            )
        except Exception as e:
            logger.error("Failed to update template %s: %s", template_id, e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to update template: {str(e)}"
            )
        
        return await TemplateService.get_template(user_id, template_id)
    
    @staticmethod
    async def delete_template(user_id: str, template_id: str) -> None:
        """Delete a template the user owns"""
        
        await TemplateService._require_owned(user_id, template_id)
        
        try:
            await database.execute(
                "DELETE FROM saved_templates WHERE id = :template_id AND owner_id = :user_id",
                {"template_id": template_id, "user_id": user_id}
            )
        except Exception as e:
            logger.error("Failed to delete template %s: %s", template_id, e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to delete template: {str(e)}"
            )
        
        logger.info("Deleted template %s", template_id)


# Create singleton instance
template_service = TemplateService()
