"""
OpenRouter Column Classifier
Asks a chat-completion model which spreadsheet column holds which field
"""

import logging
from typing import Optional
import httpx

from badgeforge.config import settings
from badgeforge.engine.archetypes import Archetype
from badgeforge.engine.inference import (
    ClassificationRequest,
    ClassifierUnavailable,
    ColumnMapping,
    extract_json_object,
)

logger = logging.getLogger(__name__)

ARCHETYPE_CONTEXT = {
    Archetype.SCHOOL: (
        "The user selected the SCHOOL ID template. Prioritize mapping: name, schoolId (roll number), "
        "className (class/grade), section, fatherName, motherName, dateOfBirth, address, "
        "contactNumber, schoolName."
    ),
    Archetype.CORPORATE: (
        "The user selected the CORPORATE template. Prioritize mapping: name, company, "
        "role (designation/title), registrationId (employee ID), contactNumber, address."
    ),
    Archetype.CONFERENCE: (
        "The user selected the CONFERENCE template. Prioritize mapping: name, company, "
        "passType (ticket type), registrationId, role, tracks."
    ),
}

FIELD_GUIDE = """- name: attendee or student name
- company: company/organization (or -1 for school rosters)
- passType: pass/ticket type or category
- registrationId: ticket/registration number
- role: Speaker/Attendee/Organizer/Teacher/Student
- jobTitle, eventName, eventStartDate, eventEndDate, validFrom, validTo, sponsor
- tracks: workshop/track/session columns (array)
- schoolId: school-issued ID / roll number
- schoolName, fatherName, motherName, dateOfBirth
- contactNumber (phone), address (full address)
- className (class/grade), section, bloodGroup, emergencyContact
- extras: array of {"label": "<header>", "index": <column>} for EVERY column, using the header
  name as the label, even if it also maps to a primary field."""


def build_prompt(request: ClassificationRequest) -> str:
    context = ARCHETYPE_CONTEXT[request.archetype_hint or Archetype.CONFERENCE]

    hints = ""
    if request.custom_label_hints:
        pairs = ", ".join(f'"{label}" -> {key}' for key, label in request.custom_label_hints.items())
        hints = (
            "\n\nThe user has renamed some fields. Use these custom labels to help map columns:\n"
            + pairs
        )

    sample = request.header_sample
    if request.data_sample:
        sample += "\n" + request.data_sample

    return (
        f"You are analyzing a {request.file_kind} file for ID card generation.\n\n"
        f"CONTEXT: {context}\n\n"
        f"Sample data (header + up to 2 rows):\n{sample}{hints}\n\n"
        f"Map the column headers to these fields (0-indexed):\n{FIELD_GUIDE}\n\n"
        'Return ONLY a JSON object such as {"name": 2, "company": 3, "passType": 4, '
        '"registrationId": 1, "role": -1, "tracks": [5, 6], '
        '"extras": [{"label": "City", "index": 7}]}.\n'
        "Use -1 if a field is not present."
    )


class OpenRouterClassifier:
    """
    Column classifier backed by the OpenRouter chat-completions API.

    Every failure (no key, transport, HTTP status, empty or malformed reply)
    surfaces as ClassifierUnavailable so imports can fall back.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.OPENROUTER_API_KEY
        self.api_url = api_url or settings.OPENROUTER_API_URL
        self.model = model or settings.OPENROUTER_MODEL
        self.timeout = timeout or settings.INFERENCE_TIMEOUT_SECONDS
        self.transport = transport

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": settings.OPENROUTER_REFERER,
            "X-Title": settings.APP_NAME,
        }

    async def _complete(self, prompt: str) -> str:
        body = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": 0.1,
            "max_tokens": 500,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.post(self.api_url, headers=self._headers(), json=body)
        except httpx.HTTPError as e:
            raise ClassifierUnavailable(f"OpenRouter request failed: {e}") from e

        if resp.status_code != 200:
            raise ClassifierUnavailable(f"OpenRouter API error: {resp.status_code} {resp.text[:200]}")

        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ClassifierUnavailable(f"Unexpected OpenRouter response shape: {e}") from e

        if not content:
            raise ClassifierUnavailable("No content received from the model")
        return content

    async def classify(self, request: ClassificationRequest) -> ColumnMapping:
        if not self.api_key:
            raise ClassifierUnavailable("OPENROUTER_API_KEY is not set")

        try:
            content = await self._complete(build_prompt(request))
            mapping = ColumnMapping.from_payload(extract_json_object(content))
        except ClassifierUnavailable as e:
            logger.warning("Column classifier unavailable: %s", e)
            raise

        logger.debug("Column mapping: %s", mapping.fields)
        return mapping
