"""
Bulk Photo Matching
Binds uploaded photos to records by the first number in each filename
"""

import logging
import re
from typing import Callable, Iterable, List, Optional, Tuple

from pydantic import BaseModel

from badgeforge.engine.records import Record

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"\d+")


def extract_index(filename: str) -> Optional[int]:
    """First run of decimal digits anywhere in the name, e.g. photo_5.png -> 5"""
    match = _DIGITS.search(filename or "")
    if not match:
        return None
    return int(match.group(0))


class PhotoMatchResult(BaseModel):
    records: List[Record]
    matched: int = 0
    failed: int = 0


def match_photos(
    records: List[Record],
    files: Iterable[Tuple[str, bytes]],
    encode: Callable[[bytes], str],
) -> PhotoMatchResult:
    """
    Encode each file and bind it to the record at its filename index.

    Files are handled one at a time. Missing digits, an index outside the
    current record list, or an encoder failure each count as one failure.
    """
    updated = list(records)
    matched = 0
    failed = 0

    for filename, content in files:
        index = extract_index(filename)
        if index is None or index >= len(updated):
            logger.info("No record for photo %s", filename)
            failed += 1
            continue

        try:
            data_uri = encode(content)
        except (ValueError, OSError) as e:
            logger.warning("Could not process photo %s: %s", filename, e)
            failed += 1
            continue

        updated[index] = updated[index].model_copy(update={"image": data_uri})
        matched += 1

    return PhotoMatchResult(records=updated, matched=matched, failed=failed)
