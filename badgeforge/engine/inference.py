"""
Schema Inference
Turns raw tabular text into Records using a column-index mapping from a
classifier, with the fixed-column parser as the fallback path
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional, Protocol

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_snake

from badgeforge.engine.archetypes import Archetype
from badgeforge.engine.fallback_parser import HeuristicParser
from badgeforge.engine.records import Record, generated_registration_id
from badgeforge.engine.tabular import Table, split_table

logger = logging.getLogger(__name__)

# Fields a classifier may map to a single column, in wire (camelCase) form
MAPPED_FIELDS = (
    "name",
    "company",
    "passType",
    "registrationId",
    "role",
    "jobTitle",
    "eventName",
    "eventStartDate",
    "eventEndDate",
    "validFrom",
    "validTo",
    "sponsor",
    "schoolId",
    "schoolName",
    "fatherName",
    "motherName",
    "dateOfBirth",
    "contactNumber",
    "address",
    "className",
    "section",
    "bloodGroup",
    "emergencyContact",
)

# Presence of any of these marks a school roster
SCHOOL_FIELDS = (
    "schoolId",
    "schoolName",
    "fatherName",
    "motherName",
    "className",
    "section",
    "dateOfBirth",
    "emergencyContact",
)

EDUCATION_HEADER = re.compile(r"\b(grade|gpa|class|student|school|university)\b", re.IGNORECASE)

ROLE_KEYWORDS = (
    ("speaker", "Speaker"),
    ("organizer", "Organizer"),
    ("teacher", "Teacher"),
    ("student", "Student"),
)

MIN_DATA_COLUMNS = 3
HEADER_TOKEN = "name"

_FENCE_START = re.compile(r"^```[a-zA-Z]*\s*")
_FENCE_END = re.compile(r"\s*```\s*$")
_INDEX_TEXT = re.compile(r"-?[0-9]+")


class ClassifierUnavailable(Exception):
    """The column classifier could not produce a usable mapping"""


class MappingParseError(ClassifierUnavailable):
    """Classifier output is not the expected JSON object"""


def _as_index(value: Any) -> int:
    if isinstance(value, bool):
        return -1
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and _INDEX_TEXT.fullmatch(value.strip()):
        return int(value.strip())
    return -1


class ExtraColumn(BaseModel):
    label: str
    index: int


class ColumnMapping(BaseModel):
    """Zero-based column index per known field; -1 when absent"""
    fields: Dict[str, int] = Field(default_factory=dict)
    tracks: List[int] = Field(default_factory=list)
    extras: List[ExtraColumn] = Field(default_factory=list)

    def index_of(self, field: str) -> int:
        return self.fields.get(field, -1)

    @classmethod
    def from_payload(cls, payload: Any) -> "ColumnMapping":
        if not isinstance(payload, dict):
            raise MappingParseError("Column mapping must be a JSON object")

        fields = {name: _as_index(payload.get(name, -1)) for name in MAPPED_FIELDS}

        raw_tracks = payload.get("tracks")
        tracks = []
        if isinstance(raw_tracks, list):
            tracks = [i for i in (_as_index(v) for v in raw_tracks) if i >= 0]

        raw_extras = payload.get("extras")
        extras = []
        if isinstance(raw_extras, list):
            for entry in raw_extras:
                if not isinstance(entry, dict) or not entry.get("label"):
                    continue
                index = _as_index(entry.get("index"))
                if index >= 0:
                    extras.append(ExtraColumn(label=str(entry["label"]), index=index))

        return cls(fields=fields, tracks=tracks, extras=extras)


def extract_json_object(text: str) -> dict:
    """Parse the outermost {...} span of a reply that may carry prose or code fences"""
    if not text or not text.strip():
        raise MappingParseError("Empty classifier reply")

    cleaned = _FENCE_END.sub("", _FENCE_START.sub("", text.strip()))
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end > start:
        cleaned = cleaned[start:end + 1]

    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise MappingParseError(f"Classifier reply is not JSON: {e}") from e
    if not isinstance(payload, dict):
        raise MappingParseError("Classifier reply is not a JSON object")
    return payload


class ClassificationRequest(BaseModel):
    header_sample: str
    data_sample: str
    archetype_hint: Optional[Archetype] = None
    custom_label_hints: Dict[str, str] = Field(default_factory=dict)
    file_kind: str = "csv"


class ColumnClassifier(Protocol):
    async def classify(self, request: ClassificationRequest) -> ColumnMapping:
        ...


def canonical_role(value: str) -> str:
    lowered = (value or "").lower()
    for keyword, role in ROLE_KEYWORDS:
        if keyword in lowered:
            return role
    return ""


def classify_archetype(
    values: Dict[str, str],
    header: List[str],
    pass_type: str,
    role: str,
    company: str,
) -> Archetype:
    """Student signals win, then a real organization, then the conference default"""
    has_school_fields = any(values.get(field) for field in SCHOOL_FIELDS)
    student_pass = "student" in (pass_type or "").lower()
    student_role = role in ("Student", "Teacher")
    education_headers = any(EDUCATION_HEADER.search(h) for h in header)

    if has_school_fields or student_pass or student_role or education_headers:
        return Archetype.SCHOOL
    if company and company.strip().lower() != "self":
        return Archetype.CORPORATE
    return Archetype.CONFERENCE


def _build_tracks(cells: List[str], header: List[str], indices: List[int]) -> List[str]:
    tracks = []
    for index in indices:
        if index >= len(cells):
            continue
        value = cells[index]
        if not value or value.lower() == HEADER_TOKEN:
            continue
        if index < len(header) and value.lower() == header[index].lower():
            continue
        tracks.append(value)
    return tracks


def _build_extras(cells: List[str], header: List[str], mapping: ColumnMapping) -> Dict[str, str]:
    extras = {}
    for extra in mapping.extras:
        if extra.index < len(cells) and cells[extra.index]:
            extras[extra.label] = cells[extra.index]

    # Every header column lands here even when also mapped to a known field,
    # so renamed labels can reach any source column.
    for index, label in enumerate(header):
        if label and index < len(cells) and cells[index]:
            extras[label] = cells[index]
    return extras


def build_records(
    table: Table,
    mapping: ColumnMapping,
    archetype_hint: Optional[Archetype] = None,
) -> List[Record]:
    """Apply a column mapping to every data row, keeping source order"""
    records = []

    for row_number, cells in enumerate(table.rows, start=1):
        if len(cells) < MIN_DATA_COLUMNS:
            logger.debug("Skipping row %d: %d column(s)", row_number, len(cells))
            continue

        def pick(field: str) -> str:
            index = mapping.index_of(field)
            if 0 <= index < len(cells):
                return cells[index]
            return ""

        values = {field: pick(field) for field in MAPPED_FIELDS}
        role = canonical_role(values["role"])

        if archetype_hint is not None:
            archetype = Archetype(archetype_hint)
        else:
            archetype = classify_archetype(values, table.header, values["passType"], role, values["company"])

        is_school = archetype is Archetype.SCHOOL
        optional = {
            to_snake(field): values[field] or None
            for field in MAPPED_FIELDS
            if field not in ("name", "company", "passType", "registrationId", "role")
        }

        records.append(Record(
            archetype=archetype,
            registration_id=(
                values["registrationId"] or values["schoolId"] or generated_registration_id(row_number)
            ),
            name=values["name"] or "Unknown",
            company=values["company"] or values["schoolName"] or "Self",
            pass_type=values["passType"] or ("Student ID" if is_school else "General Entry"),
            role=role or ("Student" if is_school else "Attendee"),
            tracks=_build_tracks(cells, table.header, mapping.tracks),
            extras=_build_extras(cells, table.header, mapping),
            **optional,
        ))

    return records


class ImportResult(BaseModel):
    records: List[Record] = Field(default_factory=list)
    used_fallback: bool = False
    notice: Optional[str] = None


FALLBACK_NOTICE = "Smart column mapping is unavailable; the file was imported with basic parsing."


class SchemaInference:
    """
    Classifier first, fixed-column parser second.

    Only ClassifierUnavailable triggers the fallback; classifiers translate
    their own transport and provider errors into it.
    """

    def __init__(self, classifier: Optional[ColumnClassifier] = None, fallback: Optional[HeuristicParser] = None):
        self.classifier = classifier
        self.fallback = fallback or HeuristicParser()

    async def infer(
        self,
        raw_text: str,
        file_kind: str = "csv",
        archetype_hint: Optional[Archetype] = None,
        custom_label_hints: Optional[Dict[str, str]] = None,
    ) -> ImportResult:
        table = split_table(raw_text)
        if table is None:
            return ImportResult()

        try:
            if self.classifier is None:
                raise ClassifierUnavailable("No column classifier configured")
            request = ClassificationRequest(
                header_sample=table.lines[0],
                data_sample="\n".join(table.lines[1:3]),
                archetype_hint=archetype_hint,
                custom_label_hints=dict(custom_label_hints or {}),
                file_kind=file_kind,
            )
            mapping = await self.classifier.classify(request)
        except ClassifierUnavailable as e:
            logger.warning("Column classification failed, using basic parser: %s", e)
            records = self.fallback.parse(raw_text, archetype_hint)
            return ImportResult(records=records, used_fallback=True, notice=FALLBACK_NOTICE)

        records = build_records(table, mapping, archetype_hint)
        logger.info("Imported %d record(s) from %d data line(s)", len(records), len(table.rows))
        return ImportResult(records=records)
