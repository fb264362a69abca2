"""
Row-to-vCard conversion.

Pipeline:
- select the row window (1-based start/end)
- map each row positionally onto a Contact
- serialize each contact to a vCard 4.0 block
- concatenate the blocks

Everything here is pure apart from the clock used for the REV line,
which callers can replace.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional, Sequence

from .models import Contact, ConversionOptions, ConversionResult
from .rules import (
    COUNTRY_CODE_LENGTH,
    LINE_TERMINATOR,
    REV_TIMESTAMP_FORMAT,
    ROW_FIELDS,
    SUBSCRIBER_GROUP_LENGTH,
    TELEPHONE_TYPE,
    VCARD_VERSION,
    ZONE_NUMBER_LENGTH,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def select_rows(rows: Sequence[Any], start: Optional[int] = None, end: Optional[int] = None) -> List[Any]:
    """
    Return the rows between the 1-based `start` and `end` row numbers, inclusive.

    Out-of-range bounds are clamped by slicing, never raised.
    """
    offset = start - 1 if start else 0
    if end:
        return list(rows[offset:end])
    return list(rows[offset:])


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def contact_from_row(row: Sequence[Any]) -> Contact:
    """
    Map a raw row onto a Contact by position.

    Extra cells are ignored; missing trailing cells become empty strings.
    """
    values = {
        field: _cell_text(row[i]) if i < len(row) else ""
        for i, field in enumerate(ROW_FIELDS)
    }
    return Contact(**values)


def format_telephone_number(raw: str, enabled: bool) -> str:
    """
    Regroup a telephone number as "+CC ZZZ SS SS SS".

    Purely positional: the first two characters are the country code, the
    next three the zone number, the rest is split into pairs. Short input
    gives short (possibly empty) groups.
    """
    if not enabled:
        return raw

    zone_end = COUNTRY_CODE_LENGTH + ZONE_NUMBER_LENGTH
    country_code = f"+{raw[:COUNTRY_CODE_LENGTH]}"
    zone_number = raw[COUNTRY_CODE_LENGTH:zone_end]
    rest = raw[zone_end:]
    subscriber_number = " ".join(
        rest[i:i + SUBSCRIBER_GROUP_LENGTH]
        for i in range(0, len(rest), SUBSCRIBER_GROUP_LENGTH)
    )
    return f"{country_code} {zone_number} {subscriber_number}"


def format_rev_timestamp(moment: datetime) -> str:
    # naive datetimes are taken to be UTC already
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime(REV_TIMESTAMP_FORMAT)


def contact_to_vcard(contact: Contact, telephone: bool = False, clock: Optional[Clock] = None) -> str:
    """
    Serialize one contact as a vCard 4.0 block.

    Field values are written verbatim; `;`, `,` and `\\` are not escaped.
    FN always joins first and last name with a space, even if one is empty.
    """
    clock = clock or utc_now
    first_name = contact.first_name or ""
    last_name = contact.last_name or ""

    lines = ["BEGIN:VCARD", f"VERSION:{VCARD_VERSION}"]
    if first_name or last_name:
        lines.append(f"N:{last_name};{first_name};;;")
        lines.append(f"FN:{first_name} {last_name}")
    if contact.telephone_number:
        formatted = format_telephone_number(contact.telephone_number, telephone)
        lines.append(f"TEL;TYPE={TELEPHONE_TYPE}:{formatted}")
    if contact.email_address:
        lines.append(f"EMAIL:{contact.email_address}")
    lines.append(f"REV:{format_rev_timestamp(clock())}")
    lines.append("END:VCARD")

    return "".join(line + LINE_TERMINATOR for line in lines)


def convert_rows(
    rows: Sequence[Sequence[Any]],
    options: Optional[ConversionOptions] = None,
    clock: Optional[Clock] = None,
) -> ConversionResult:
    options = options or ConversionOptions()

    window = select_rows(rows, options.start, options.end)
    logger.debug(
        "Row window start=%s end=%s selected %d of %d rows",
        options.start, options.end, len(window), len(rows),
    )

    contacts = [contact_from_row(row) for row in window]
    vcards = "".join(
        contact_to_vcard(contact, telephone=options.telephone, clock=clock)
        for contact in contacts
    )
    return ConversionResult(vcards=vcards, contacts=len(contacts))
