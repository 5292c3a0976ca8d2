"""
Record Model
Normalized attendee/student/employee entity and collection operations
"""

import re
import uuid
from typing import Dict, Iterable, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from badgeforge.engine.archetypes import Archetype


class RecordPatchError(ValueError):
    """Patch names a field a record does not have"""


def new_record_id() -> str:
    return f"att-{uuid.uuid4().hex}"


# Registration ids filled in by importers when the source row has none
MISSING_REGISTRATION_ID = "N/A"
_GENERATED_ID = re.compile(r"AUTO_\d+")


def generated_registration_id(row_number: int) -> str:
    return f"AUTO_{row_number}"


class Record(BaseModel):
    """
    One card's worth of data.

    Known fields are fixed; everything else lives in `extras`, keyed by the
    original column header.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=new_record_id)
    archetype: Archetype = Archetype.CONFERENCE

    # Common
    registration_id: str = ""
    name: str = ""
    company: str = ""
    pass_type: str = ""
    role: str = ""
    tracks: List[str] = Field(default_factory=list)

    # Conference / corporate
    job_title: Optional[str] = None
    event_name: Optional[str] = None
    event_subtitle: Optional[str] = None
    event_start_date: Optional[str] = None
    event_end_date: Optional[str] = None
    valid_from: Optional[str] = None
    valid_to: Optional[str] = None
    sponsor: Optional[str] = None
    barcode_value: Optional[str] = None

    # School
    school_id: Optional[str] = None
    school_name: Optional[str] = None
    class_name: Optional[str] = None
    section: Optional[str] = None
    father_name: Optional[str] = None
    mother_name: Optional[str] = None
    date_of_birth: Optional[str] = None
    blood_group: Optional[str] = None
    emergency_contact: Optional[str] = None

    # Shared contact details
    contact_number: Optional[str] = None
    address: Optional[str] = None

    extras: Dict[str, str] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("extras", "extraFields", "extra_fields"),
    )
    image: Optional[str] = Field(default=None, description="Data URI, replaced wholesale")


PATCHABLE_FIELDS = frozenset(name for name in Record.model_fields if name != "id")


def _field_name(key: str) -> Optional[str]:
    if key in Record.model_fields:
        return key
    for name, info in Record.model_fields.items():
        if info.alias == key:
            return name
    if key == "extraFields":
        return "extras"
    return None


def apply_patch(record: Record, patch: Dict[str, object]) -> Record:
    """
    Return a copy of `record` with `patch` applied field by field.

    Keys may be snake_case or camelCase. `extras` entries are merged
    (append-and-overwrite); every other field, `image` included, is replaced.
    """
    updates = {}
    for key, value in (patch or {}).items():
        name = _field_name(key)
        if name is None or name not in PATCHABLE_FIELDS:
            raise RecordPatchError(f"Unknown record field: {key}")
        updates[name] = value

    data = record.model_dump()
    extras_patch = updates.pop("extras", None)
    data.update(updates)
    if extras_patch:
        data["extras"] = {**data["extras"], **{str(k): str(v) for k, v in extras_patch.items()}}
    return Record.model_validate(data)


def bulk_update(records: List[Record], ids: Iterable[str], patch: Dict[str, object]) -> List[Record]:
    targets = set(ids)
    return [apply_patch(r, patch) if r.id in targets else r for r in records]


def has_real_registration_id(record: Record) -> bool:
    """False for blank ids and the placeholders importers fill in"""
    reg_id = (record.registration_id or "").strip()
    return bool(reg_id) and reg_id != MISSING_REGISTRATION_ID and not _GENERATED_ID.fullmatch(reg_id)


def _merge_key(record: Record) -> str:
    if has_real_registration_id(record):
        return f"reg:{record.registration_id.strip()}"
    return f"id:{record.id}"


def merge_records(existing: List[Record], incoming: List[Record], replace: bool = False) -> List[Record]:
    """
    Combine an import batch with the current collection.

    With `replace` the batch becomes the collection. Otherwise records match
    on registration id when present, else on id; matches keep the existing id
    (and image when the incoming record has none), the rest are appended in
    source order.
    """
    if replace:
        return list(incoming)

    merged = list(existing)
    positions = {_merge_key(r): i for i, r in enumerate(merged)}

    for record in incoming:
        key = _merge_key(record)
        if key in positions:
            index = positions[key]
            current = merged[index]
            update = {"id": current.id}
            if not record.image:
                update["image"] = current.image
            merged[index] = record.model_copy(update=update)
        else:
            positions[key] = len(merged)
            merged.append(record)

    return merged


def remove_extra_field(records: List[Record], label: str) -> List[Record]:
    """Drop `label` from every record's extras"""
    result = []
    for record in records:
        if label in record.extras:
            extras = {k: v for k, v in record.extras.items() if k != label}
            record = record.model_copy(update={"extras": extras})
        result.append(record)
    return result
