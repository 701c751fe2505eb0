"""
mermaid.live URL export.

The viewer reads its state from the URL fragment: a JSON record
``{"code": ..., "mermaid": {"theme": "default"}}``, zlib-compressed and
encoded with URL-safe base64 (padding kept), behind ``#pako:``.
"""

import base64
import binascii
import json
import logging
import zlib

from .errors import ExportError

log = logging.getLogger(__name__)

LIVE_URL = "https://mermaid.live/view/#pako:"
PAKO_PREFIX = "#pako:"
THEME = "default"


def encode_state(code: str) -> str:
    """Compress and encode Mermaid code into the ``pako`` payload."""
    state = {"code": code, "mermaid": {"theme": THEME}}
    try:
        data = json.dumps(state, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    except (TypeError, UnicodeEncodeError) as exc:
        raise ExportError(f"cannot encode diagram code: {exc}") from exc
    compressed = zlib.compress(data, 9)
    return base64.urlsafe_b64encode(compressed).decode("ascii")


def live_url(code: str, base_url: str = LIVE_URL) -> str:
    """
    Build the view URL for rendered Mermaid code.

    Args:
        code: Rendered Mermaid code
        base_url: Viewer URL ending in ``#pako:``

    Returns:
        base_url followed by the encoded payload

    Raises:
        ExportError: the code cannot be encoded (e.g. lone surrogates)
    """
    if not isinstance(code, str):
        raise ExportError(f"diagram code must be text, got {type(code).__name__}")
    url = base_url + encode_state(code)
    log.debug("Built live URL with %d characters for %d characters of code", len(url), len(code))
    return url


def decode_state(payload: str) -> dict:
    """Inverse of encode_state: return the JSON record."""
    try:
        # The viewer itself writes payloads without "=" padding
        padded = payload + "=" * (-len(payload) % 4)
        compressed = base64.urlsafe_b64decode(padded.encode("ascii"))
        data = zlib.decompress(compressed)
        state = json.loads(data.decode("utf-8"))
    except (binascii.Error, zlib.error, UnicodeError, ValueError) as exc:
        raise ExportError(f"cannot decode live URL payload: {exc}") from exc
    if not isinstance(state, dict) or not isinstance(state.get("code"), str):
        raise ExportError("live URL payload has no diagram code")
    return state


def decode_live_url(url: str) -> dict:
    """Return the state record embedded in a ``#pako:`` view URL."""
    _, sep, payload = url.partition(PAKO_PREFIX)
    if not sep:
        raise ExportError(f"not a pako URL: {url}")
    return decode_state(payload)
