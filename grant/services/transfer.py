"""
Export/import wire format.

An export is compact JSON wrapped in base64 so it survives being pasted
into a chat message. The encoded text must fit in one message.
"""
import base64
import binascii
import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

EXPORT_VERSION = 1
EXPORT_TYPE = "officers_export"
MAX_ENCODED_LENGTH = 1700


class InvalidPayload(ValueError):
    """Import payload could not be decoded. The message is safe to show to the caller."""


def build_export_envelope(
    rows: List[Dict[str, Any]],
    limit: int,
    offset: int,
    created_at: Optional[datetime] = None
) -> Dict[str, Any]:
    """
    Wrap one page of rows with version, timestamp and pagination metadata.

    has_more_possible only says the page was full; the next page may
    still be empty.
    """
    count = len(rows)
    created_at = created_at or datetime.now(timezone.utc)
    return {
        "version": EXPORT_VERSION,
        "created_at": created_at.replace(microsecond=0).isoformat(),
        "type": EXPORT_TYPE,
        "pagination": {
            "limit": limit,
            "offset": offset,
            "count": count,
            "next_offset": offset + count,
            "has_more_possible": count == limit,
        },
        "rows": rows,
    }


def encode_payload(envelope: Dict[str, Any]) -> str:
    compact = json.dumps(envelope, separators=(",", ":"))
    return base64.b64encode(compact.encode("utf-8")).decode("ascii")


def fits_in_message(encoded: str) -> bool:
    return len(encoded) <= MAX_ENCODED_LENGTH


def decode_payload(encoded: str) -> Dict[str, Any]:
    """
    Decode an export payload back into its envelope.

    Raises InvalidPayload for bad base64, or for anything that is not a
    JSON object with a `rows` array.
    """
    try:
        raw = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidPayload("Invalid payload: not valid base64.")

    try:
        document = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        raise InvalidPayload("Invalid payload: JSON format is incorrect.")

    if not isinstance(document, dict) or not isinstance(document.get("rows"), list):
        raise InvalidPayload("Invalid payload: JSON format is incorrect.")
    return document
