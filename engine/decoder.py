# decoder.py – recover a JSON object hidden in a base64 blob
#
# Pure text in, optional dict out. No I/O, and failures are logged, not raised.

import base64
import binascii
import json
import logging
import re
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

MIN_BLOB_LENGTH = 80

# contiguous run: any whitespace or punctuation ends a candidate
BASE64_RUN = re.compile(r"[A-Za-z0-9+/=]{%d,}" % MIN_BLOB_LENGTH)


def find_base64_blob(text: str) -> Optional[str]:
    if not text:
        return None
    m = BASE64_RUN.search(text)
    return m.group(0) if m else None


def _b64decode(blob: str) -> bytes:
    stripped = blob.rstrip("=")
    padded = stripped + "=" * (-len(stripped) % 4)
    return base64.b64decode(padded, validate=True)


def decode_payload(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Find the first long base64 run in `text`, decode it and parse the JSON
    object inside (first '{' to last '}'). Returns None on any failure.
    """
    blob = find_base64_blob(text or "")
    if not blob:
        logger.debug("No base64 blob found")
        return None

    try:
        raw = _b64decode(blob)
    except (binascii.Error, ValueError) as e:
        logger.warning("Base64 decode failed: %s", e)
        return None

    decoded = raw.decode("utf-8", errors="replace")
    start, end = decoded.find("{"), decoded.rfind("}")
    if start == -1 or end < start:
        logger.info("Base64 decoded but no JSON object found inside")
        return None

    try:
        obj = json.loads(decoded[start:end + 1])
    except (ValueError, RecursionError) as e:
        # ValueError also covers integers past the int conversion digit limit
        logger.warning("Decoded JSON is invalid: %s", e)
        return None

    if not isinstance(obj, dict):
        logger.info("Decoded JSON is not an object")
        return None

    logger.info("Decoded JSON from base64 payload (keys: %s)", sorted(obj))
    return obj
