"""
Fixed-Column Parser
Basic import path used when column classification is unavailable
"""

import csv
import logging
import re
from typing import List, Optional

from badgeforge.engine.archetypes import Archetype
from badgeforge.engine.records import MISSING_REGISTRATION_ID, Record
from badgeforge.engine.tabular import BOM, detect_delimiter, split_cells

logger = logging.getLogger(__name__)


class HeuristicParser:
    """
    Parser for registration exports laid out as
    [serial, registration id, name, company, pass data...]
    """

    HEADER_MARKER = "SL. NO."
    SECTION_MARKERS = ("only workshop passes",)
    FALLBACK_LABELS = ("SL. NO.", "REG. ID", "NAME", "COMPANY")
    MIN_COLUMNS = 4
    DEFAULT_PASS = "General Entry"

    @classmethod
    def _role_from(cls, pass_columns: List[str]) -> str:
        lowered = [c.lower() for c in pass_columns]
        if any("speaker" in c for c in lowered):
            return "Speaker"
        if any("organizer" in c for c in lowered):
            return "Organizer"
        return "Attendee"

    @classmethod
    def _extras(cls, cells: List[str], header: Optional[List[str]]) -> dict:
        labels = list(header) if header else list(cls.FALLBACK_LABELS)
        extras = {}
        for index, value in enumerate(cells):
            label = labels[index] if index < len(labels) and labels[index] else f"Column {index + 1}"
            if value:
                extras[label] = value
        return extras

    @classmethod
    def _parse_line(
        cls,
        line: str,
        delimiter: str,
        header: Optional[List[str]],
        archetype: Archetype,
    ) -> Optional[Record]:
        cells = split_cells(line, delimiter)
        if len(cells) < cls.MIN_COLUMNS:
            return None

        name = cells[2]
        if not name or name.upper() == "NAME":
            return None

        pass_columns = [c for c in cells[4:] if c]
        return Record(
            archetype=archetype,
            registration_id=cells[1] or MISSING_REGISTRATION_ID,
            name=name,
            company=cells[3],
            pass_type=pass_columns[0] if pass_columns else cls.DEFAULT_PASS,
            tracks=pass_columns[1:],
            role=cls._role_from(pass_columns),
            extras=cls._extras(cells, header),
        )

    def parse(self, raw_text: str, archetype_hint: Optional[Archetype] = None) -> List[Record]:
        """
        Parse whatever rows look valid. Never raises; unparseable lines are
        dropped.
        """
        records = []
        try:
            lines = (raw_text or "").lstrip(BOM).splitlines()
            archetype = Archetype(archetype_hint) if archetype_hint else Archetype.CONFERENCE
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning("Basic parser rejected input: %s", e)
            return records

        delimiter = detect_delimiter(lines)
        data_start = re.compile(r"^\d+" + re.escape(delimiter))
        header = None
        started = False

        for line_number, line in enumerate(lines, start=1):
            clean = line.strip()
            if not clean:
                continue

            if clean.upper().startswith(self.HEADER_MARKER):
                started = True
                header = split_cells(line, delimiter)
                continue

            if not started:
                # Data may start without a header row
                if data_start.match(clean):
                    started = True
                else:
                    continue

            if any(marker in clean.lower() for marker in self.SECTION_MARKERS):
                continue

            try:
                record = self._parse_line(line, delimiter, header, archetype)
            except (ValueError, IndexError, csv.Error) as e:
                logger.debug("Dropping line %d: %s", line_number, e)
                continue

            if record is not None:
                records.append(record)

        logger.info("Basic parser produced %d record(s)", len(records))
        return records
