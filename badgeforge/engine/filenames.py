"""
Export Filenames
Expands a filename template against a record
"""

import re

from badgeforge.engine.records import Record

DEFAULT_TEMPLATE = "{name}_IDCARD"
DEFAULT_STEM = "IDCard"

_PLACEHOLDER = re.compile(r"\{(name|company|registrationId|schoolId|passType|role)\}", re.IGNORECASE)
_ILLEGAL = re.compile(r'[\\/:*?"<>|]')


def _replacements(record: Record) -> dict:
    return {
        "name": record.name or "Attendee",
        "company": record.company or "Company",
        "registrationid": record.registration_id or "ID",
        "schoolid": record.school_id or record.registration_id or "ID",
        "passtype": record.pass_type or "Pass",
        "role": record.role or "Attendee",
    }


def sanitize(value: str) -> str:
    value = _ILLEGAL.sub("", value)
    value = re.sub(r"\s+", "_", value)
    value = re.sub(r"_{2,}", "_", value)
    return value.strip("_")


def render_template(template: str, record: Record) -> str:
    template = template if template and template.strip() else DEFAULT_TEMPLATE
    replacements = _replacements(record)
    return _PLACEHOLDER.sub(lambda m: replacements[m.group(1).lower()], template)


def build_card_filename(record: Record, template: str, extension: str = "png") -> str:
    stem = sanitize(render_template(template, record)) or DEFAULT_STEM
    return f"{stem}.{extension}"
