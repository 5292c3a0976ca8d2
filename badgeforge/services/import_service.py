"""
Import Service
Runs schema inference on uploaded text and stores the resulting records
"""

import logging
from fastapi import HTTPException, status

from badgeforge.config import settings
from badgeforge.engine.inference import SchemaInference
from badgeforge.schemas.attendee import ImportRequest, ImportResponse
from badgeforge.services.attendee_service import AttendeeService
from badgeforge.services.openrouter import OpenRouterClassifier

logger = logging.getLogger(__name__)


def build_inference() -> SchemaInference:
    """Classifier when an API key is configured, basic parsing only otherwise"""
    classifier = OpenRouterClassifier() if settings.OPENROUTER_API_KEY else None
    return SchemaInference(classifier=classifier)


class ImportService:
    """Service for spreadsheet imports"""

    @staticmethod
    async def import_text(owner_id: str, data: ImportRequest) -> ImportResponse:
        inference = build_inference()
        result = await inference.infer(
            data.raw_text,
            file_kind=data.file_kind,
            archetype_hint=data.archetype,
            custom_label_hints=data.custom_labels,
        )

        if not result.records:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=result.notice or "No records could be read from the file"
            )

        stored = await AttendeeService.import_attendees(owner_id, result.records, replace=data.replace)
        if result.used_fallback:
            logger.info("Import for %s used basic parsing", owner_id)

        return ImportResponse(
            imported=len(result.records),
            total=len(stored),
            used_fallback=result.used_fallback,
            notice=result.notice,
            records=stored,
        )


# Create singleton instance
import_service = ImportService()
