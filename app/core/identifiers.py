"""
Sequence-based human identifiers.

Admission numbers look like 20250007 (four-digit year + four-digit sequence);
employee IDs look like GVS-25-0012 (school code, two-digit year, sequence);
postal references look like IN-00003.
The next sequence comes from the latest identifier issued for the school, so
numbering continues across calendar years.
"""
import re
from typing import Awaitable, Callable, Optional

SEQ_WIDTH = 4
_TRAILING_DIGITS = re.compile(r"(\d+)$")
_ADMISSION_NO = re.compile(r"^\d{4}(\d+)$")

# attempts before giving up on finding a free candidate
MAX_ATTEMPTS = 100


def trailing_number(value: Optional[str]) -> int:
    if not value:
        return 0
    match = _TRAILING_DIGITS.search(value.strip())
    return int(match.group(1)) if match else 0


def admission_sequence(admission_no: Optional[str]) -> int:
    """Sequence part of YYYYNNNN; other shapes fall back to their trailing digits."""
    if not admission_no:
        return 0
    match = _ADMISSION_NO.match(admission_no.strip())
    if match:
        return int(match.group(1))
    return trailing_number(admission_no)


def format_admission_no(year: int, seq: int) -> str:
    return f"{year}{seq:0{SEQ_WIDTH}d}"


def format_employee_id(prefix: Optional[str], year: int, seq: int) -> str:
    return f"{prefix or 'EMP'}-{year % 100:02d}-{seq:0{SEQ_WIDTH}d}"


async def first_free(
    start: int,
    render: Callable[[int], str],
    is_taken: Callable[[str], Awaitable[bool]],
) -> str:
    """Render start, start+1, ... until is_taken says the candidate is free."""
    seq = start
    for _ in range(MAX_ATTEMPTS):
        candidate = render(seq)
        if not await is_taken(candidate):
            return candidate
        seq += 1
    raise RuntimeError("Could not allocate a free identifier")


def format_postal_reference(postal_type: str, seq: int) -> str:
    """IN-00001 for received post, OUT-00001 for dispatched post."""
    prefix = "IN" if postal_type == "receive" else "OUT"
    return f"{prefix}-{seq:05d}"
