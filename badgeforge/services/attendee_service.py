"""
Attendee Service
Business logic for the stored record collection: import, edits and photos
"""

import json
import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Tuple, Any
from fastapi import HTTPException, status

from badgeforge.database import database
from badgeforge.engine.photos import PhotoMatchResult, match_photos
from badgeforge.engine.records import (
    Record,
    RecordPatchError,
    apply_patch,
    merge_records,
    remove_extra_field,
)
from badgeforge.engine.session import EditorSession
from badgeforge.services.image_optimizer import compress_to_data_uri

logger = logging.getLogger(__name__)

# Record fields stored one-to-one in a column
_SCALAR_FIELDS = [
    name for name in Record.model_fields
    if name not in ("id", "archetype", "tracks", "extras")
]
_COLUMNS = ["id", "owner_id", "position", "archetype", "tracks", "extras", "updated_at"] + _SCALAR_FIELDS

_INSERT_SQL = "INSERT INTO attendees ({}) VALUES ({})".format(
    ", ".join(_COLUMNS),
    ", ".join(f":{column}" for column in _COLUMNS),
)
_UPDATE_SQL = "UPDATE attendees SET {} WHERE id = :id AND owner_id = :owner_id".format(
    ", ".join(
        f"{column} = :{column}"
        for column in ["archetype", "tracks", "extras", "updated_at"] + _SCALAR_FIELDS
    )
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _load_json(value, default):
    if not value:
        return default
    try:
        return json.loads(value)
    except (json.JSONDecodeError, TypeError):
        return default


def _row_to_record(row) -> Record:
    data = dict(row)
    payload = {name: data.get(name) for name in _SCALAR_FIELDS}
    for name in ("registration_id", "name", "company", "pass_type", "role"):
        payload[name] = payload[name] or ""
    payload["id"] = data["id"]
    payload["archetype"] = data["archetype"]
    payload["tracks"] = _load_json(data.get("tracks"), [])
    payload["extras"] = _load_json(data.get("extras"), {})
    return Record.model_validate(payload)


def _record_values(record: Record, owner_id: str, position: int = None) -> dict:
    values = {name: getattr(record, name) for name in _SCALAR_FIELDS}
    values.update({
        "id": record.id,
        "owner_id": owner_id,
        "archetype": record.archetype.value,
        "tracks": json.dumps(record.tracks),
        "extras": json.dumps(record.extras),
        "updated_at": _now(),
    })
    if position is not None:
        values["position"] = position
    return values


class AttendeeService:
    """Service for record collection operations"""
    
    @staticmethod
    async def list_attendees(owner_id: str) -> List[Record]:
        """Every record of the owner, in source order"""
        
        rows = await database.fetch_all(
            "SELECT * FROM attendees WHERE owner_id = :owner_id ORDER BY position ASC",
            {"owner_id": owner_id}
        )
        return [_row_to_record(row) for row in rows]
    
    @staticmethod
    async def get_attendee(owner_id: str, attendee_id: str) -> Record:
        row = await database.fetch_one(
            "SELECT * FROM attendees WHERE id = :id AND owner_id = :owner_id",
            {"id": attendee_id, "owner_id": owner_id}
        )
        if not row:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Attendee not found"
            )
        return _row_to_record(row)
    
    @staticmethod
    async def _store_collection(owner_id: str, records: List[Record]) -> None:
        """Replace the owner's stored collection, keeping list order"""
        
        try:
            async with database.transaction():
                await database.execute(
                    "DELETE FROM attendees WHERE owner_id = :owner_id",
                    {"owner_id": owner_id}
                )
                if records:
                    await database.execute_many(
                        _INSERT_SQL,
                        [_record_values(r, owner_id, position) for position, r in enumerate(records)]
                    )
        except Exception as e:
            logger.error("Failed to store %d attendee(s): %s", len(records), e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to store attendees: {str(e)}"
            )
    
    @staticmethod
    async def _store_record(owner_id: str, record: Record) -> None:
        values = _record_values(record, owner_id)
        try:
            await database.execute(_UPDATE_SQL, values)
        except Exception as e:
            logger.error("Failed to update attendee %s: %s", record.id, e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to update attendee: {str(e)}"
            )
    
    @staticmethod
    async def import_attendees(owner_id: str, records: List[Record], replace: bool = True) -> List[Record]:
        """
        Store an import batch.
        
        With `replace` the batch becomes the collection; otherwise it is merged
        on registration id and new records are appended.
        """
        existing = [] if replace else await AttendeeService.list_attendees(owner_id)
        merged = merge_records(existing, records, replace=replace)
        await AttendeeService._store_collection(owner_id, merged)
        
        logger.info("Stored %d attendee(s) for %s (%d imported)", len(merged), owner_id, len(records))
        return merged
    
    @staticmethod
    async def update_attendee(owner_id: str, attendee_id: str, patch: Dict[str, Any]) -> Record:
        """Apply a field patch to one record"""
        
        record = await AttendeeService.get_attendee(owner_id, attendee_id)
        try:
            updated = apply_patch(record, patch)
        except (RecordPatchError, ValueError) as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=str(e)
            )
        
        await AttendeeService._store_record(owner_id, updated)
        return updated
    
    @staticmethod
    async def bulk_update(owner_id: str, ids: Iterable[str], patch: Dict[str, Any]) -> int:
        """Apply one patch to every listed record; unknown ids are ignored"""
        
        targets = set(ids)
        records = await AttendeeService.list_attendees(owner_id)
        
        updated = []
        try:
            for record in records:
                if record.id in targets:
                    updated.append(apply_patch(record, patch))
        except (RecordPatchError, ValueError) as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=str(e)
            )
        
        for record in updated:
            await AttendeeService._store_record(owner_id, record)
        return len(updated)
    
    @staticmethod
    async def delete_attendee(owner_id: str, attendee_id: str) -> None:
        await AttendeeService.get_attendee(owner_id, attendee_id)
        await database.execute(
            "DELETE FROM attendees WHERE id = :id AND owner_id = :owner_id",
            {"id": attendee_id, "owner_id": owner_id}
        )
    
    @staticmethod
    async def delete_all(owner_id: str) -> int:
        count = await database.fetch_val(
            "SELECT COUNT(*) FROM attendees WHERE owner_id = :owner_id",
            {"owner_id": owner_id}
        )
        await database.execute(
            "DELETE FROM attendees WHERE owner_id = :owner_id",
            {"owner_id": owner_id}
        )
        return count or 0
    
    @staticmethod
    async def delete_extra_field(owner_id: str, label: str) -> int:
        """Drop a column label from every record's extras; returns records changed"""
        
        records = await AttendeeService.list_attendees(owner_id)
        changed = [
            record for record, before in zip(remove_extra_field(records, label), records)
            if label in before.extras
        ]
        for record in changed:
            await AttendeeService._store_record(owner_id, record)
        
        logger.info("Removed field '%s' from %d attendee(s)", label, len(changed))
        return len(changed)
    
    @staticmethod
    async def delete_layout_field(owner_id: str, session: EditorSession, key: str) -> int:
        """
        Delete a card element and its data: stored extras under the element's
        label, then the session's label override, hidden entry and layout entry.

        `session` is updated in place; returns records changed.
        """
        records = await AttendeeService.list_attendees(owner_id)
        updated = session.delete_field(key, records)

        changed = [
            after for before, after in zip(records, updated)
            if after.extras != before.extras
        ]
        for record in changed:
            await AttendeeService._store_record(owner_id, record)

        logger.info("Deleted element '%s' and its data from %d attendee(s)", key, len(changed))
        return len(changed)

    @staticmethod
    async def set_images(owner_id: str, records: List[Record]) -> None:
        """Persist the image of each given record"""
        
        for record in records:
            await database.execute(
                "UPDATE attendees SET image = :image, updated_at = :updated_at WHERE id = :id AND owner_id = :owner_id",
                {"image": record.image, "updated_at": _now(), "id": record.id, "owner_id": owner_id}
            )
    
    @staticmethod
    async def attach_photos(owner_id: str, files: List[Tuple[str, bytes]]) -> PhotoMatchResult:
        """
        Bind uploaded photos to records by the number in each filename
        (index into the stored collection) and persist the matches.
        """
        records = await AttendeeService.list_attendees(owner_id)
        result = match_photos(records, files, compress_to_data_uri)
        
        changed = [
            after for before, after in zip(records, result.records)
            if after.image != before.image
        ]
        await AttendeeService.set_images(owner_id, changed)
        
        logger.info("Photo upload: %d matched, %d failed", result.matched, result.failed)
        return result


# Create singleton instance
attendee_service = AttendeeService()
