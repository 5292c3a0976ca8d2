"""
Label Resolution Engine
Binds layout elements to record data through user-renamable labels
"""

from enum import Enum
from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel

from badgeforge.engine.layout import (
    CUSTOM_PHOTO_PREFIX,
    CUSTOM_TEXT_PREFIX,
    ElementKind,
    ElementPosition,
    Layout,
    element_kind,
)
from badgeforge.engine.records import Record


class Sentinel(str, Enum):
    """Stand-ins for elements that are painted rather than looked up"""
    PHOTO = "PHOTO"
    QR_CODE = "QR_CODE"


DEFAULT_LABELS: Dict[str, str] = {
    "name": "Name",
    "image": "Photo",
    "company": "Company",
    "registrationId": "ID",
    "role": "Role",
    "qrCode": "QR Code",
    "fatherName": "Father's Name",
    "motherName": "Mother's Name",
    "dateOfBirth": "DOB",
    "className": "Class",
    "contactNumber": "Contact",
    "address": "Address",
    "schoolId": "School ID",
    "schoolName": "School",
    "section": "Section",
    "passType": "Pass Type",
}


def default_label_for(key: str) -> str:
    if key in DEFAULT_LABELS:
        return DEFAULT_LABELS[key]
    for prefix, caption in ((CUSTOM_TEXT_PREFIX, "Text"), (CUSTOM_PHOTO_PREFIX, "Image")):
        suffix = key[len(prefix):] if key.startswith(prefix) else ""
        if suffix.isdigit():
            return f"{caption} {suffix}"
    return key


def label_for(key: str, custom_labels: Optional[Mapping[str, str]] = None) -> str:
    custom = (custom_labels or {}).get(key)
    if custom and custom.strip():
        return custom
    return default_label_for(key)


def rename_label(custom_labels: Mapping[str, str], key: str, new_label: Optional[str]) -> Dict[str, str]:
    """
    Return a new label map with `key` renamed.

    A blank label, or one equal to the default, drops the override.
    """
    labels = dict(custom_labels or {})
    cleaned = (new_label or "").strip()
    if not cleaned or cleaned == default_label_for(key):
        labels.pop(key, None)
    else:
        labels[key] = cleaned
    return labels


def lookup_extra(extras: Mapping[str, str], label: str) -> Optional[str]:
    """
    Exact key match first, then the first case-insensitive match.
    Empty values count as missing.
    """
    value = extras.get(label)
    if value:
        return value

    lowered = label.lower()
    for extra_key, extra_value in extras.items():
        if extra_value and extra_key.lower() == lowered:
            return str(extra_value)
    return None


def resolve(
    element_key: str,
    layout: Layout,
    custom_labels: Optional[Mapping[str, str]],
    record: Optional[Record],
) -> str:
    """
    Display value for one element of one record.

    Photo and QR elements yield a Sentinel. Text elements look their label
    up in the record's extras and fall back to the label itself, so an
    unbound element still shows what belongs there.
    """
    layout.get(element_key)

    kind = element_kind(element_key)
    if kind is ElementKind.PHOTO:
        return Sentinel.PHOTO
    if kind is ElementKind.QR:
        return Sentinel.QR_CODE

    label = label_for(element_key, custom_labels)
    if record is not None:
        value = lookup_extra(record.extras, label)
        if value is not None:
            return value
    return label


class ResolvedElement(BaseModel):
    key: str
    kind: ElementKind
    label: str
    value: str
    position: ElementPosition


def resolve_card(
    layout: Layout,
    custom_labels: Optional[Mapping[str, str]],
    record: Optional[Record],
) -> List[ResolvedElement]:
    """Every present and visible element of the layout, resolved for `record`"""
    resolved = []
    for key, position in layout.elements.items():
        if not position.visible:
            continue
        value = resolve(key, layout, custom_labels, record)
        resolved.append(ResolvedElement(
            key=key,
            kind=element_kind(key),
            label=label_for(key, custom_labels),
            value=value.value if isinstance(value, Sentinel) else value,
            position=position.model_copy(),
        ))
    return resolved
