"""Gateway response normalization.

The gateway answers either with one JSON document or with a
``text/event-stream`` body. Its tool results carry the actual data as text
inside an ``<untrusted-data-...>`` tag, and the JSON inside that tag is
sometimes double-encoded (escaped quotes and backslashes).

``normalize_body`` recovers the best JSON value it can and falls back to
the raw text. It only raises when the gateway reports a JSON-RPC error.
"""

import json
import re
from typing import Any

import httpx
import structlog

from site_publisher.errors import GatewayProtocolError

logger = structlog.get_logger()

EVENT_STREAM_TYPE = "text/event-stream"

TAGGED_DATA_PATTERN = re.compile(r"<untrusted-data[^>]*>([\s\S]*?)</untrusted-data")
JSON_SHAPE_PATTERN = re.compile(r"(\[[\s\S]*\]|\{[\s\S]*\})")


def is_event_stream(body: str, content_type: str = "") -> bool:
    """Check whether a body should be read as server-sent events."""
    if EVENT_STREAM_TYPE in content_type.lower():
        return True
    head = body.lstrip()
    return head.startswith("event:") or head.startswith("data:")


def parse_event_stream(body: str) -> list[str]:
    """Split an event-stream body into the data payload of each frame.

    Multi-line ``data:`` fields of one frame are joined with newlines.
    Frames without data and the ``[DONE]`` terminator are dropped.

    Args:
        body: Raw event-stream text

    Returns:
        Frame payloads in arrival order
    """
    payloads = []
    for frame in re.split(r"\r?\n\r?\n", body):
        data_lines = []
        for line in frame.splitlines():
            if line.startswith("data:"):
                value = line[len("data:"):]
                data_lines.append(value[1:] if value.startswith(" ") else value)
        if not data_lines:
            continue
        payload = "\n".join(data_lines)
        if payload.strip() == "[DONE]":
            continue
        payloads.append(payload)
    return payloads


def unwrap_tagged_data(text: str) -> str:
    """Strip the provider's data delimiter tag, if present."""
    match = TAGGED_DATA_PATTERN.search(text)
    return match.group(1).strip() if match else text


def unescape_double_encoded(text: str) -> str:
    """Reverse one level of quote/backslash escaping."""
    return text.replace('\\"', '"').replace("\\\\", "\\")


def recover_json(text: str) -> Any:
    """Recover a JSON value from text, or return the text itself.

    Tries a direct parse of the first JSON-shaped substring, then one
    unescape pass. Never raises.
    """
    match = JSON_SHAPE_PATTERN.search(text)
    if not match:
        return text

    candidate = match.group(1)
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        pass

    try:
        return json.loads(unescape_double_encoded(candidate))
    except json.JSONDecodeError as e:
        logger.warning(
            "gateway_payload_not_json",
            error=str(e),
            preview=candidate[:200],
        )
    return text


def decode_envelope(body: str, content_type: str = "") -> Any:
    """Decode the JSON-RPC envelope from a plain or event-stream body.

    Returns:
        The decoded envelope, or the raw body text if it is not JSON
    """
    text = body
    if is_event_stream(body, content_type):
        frames = parse_event_stream(body)
        if not frames:
            logger.warning("gateway_event_stream_empty", preview=body[:200])
            return body
        text = frames[-1]

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        logger.warning("gateway_envelope_not_json", preview=text[:200])
        return text


def extract_result(envelope: Any) -> Any:
    """Pull the tool result out of a decoded envelope.

    Raises:
        GatewayProtocolError: If the envelope carries an ``error`` member
    """
    if not isinstance(envelope, dict):
        return envelope

    error = envelope.get("error")
    if error:
        if isinstance(error, dict):
            message = error.get("message") or json.dumps(error)
        else:
            message = str(error)
        raise GatewayProtocolError(message)

    result = envelope.get("result", envelope)
    if not isinstance(result, dict):
        return result

    content = result.get("content")
    if isinstance(content, list) and content:
        first = content[0]
        if isinstance(first, dict) and isinstance(first.get("text"), str):
            return recover_json(unwrap_tagged_data(first["text"]))
    return result


def normalize_body(body: str, content_type: str = "") -> Any:
    """Normalize a raw gateway body into a JSON value or text."""
    return extract_result(decode_envelope(body, content_type))


def normalize_response(response: httpx.Response) -> Any:
    """Normalize an ``httpx.Response`` from the gateway."""
    return normalize_body(response.text, response.headers.get("content-type", ""))
