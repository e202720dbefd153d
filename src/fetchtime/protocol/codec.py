"""Wire codec shared by every transport adapter."""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from fetchtime.protocol.errors import EnvelopeDecodeError
from fetchtime.protocol.models import JsonRpcRequest, JsonRpcResponse


def decode_request(raw: str | bytes | dict[str, Any]) -> JsonRpcRequest:
    """Decode one wire message into a :class:`JsonRpcRequest`.

    Raises:
        EnvelopeDecodeError: When the payload is not JSON, not an object,
            or its members have the wrong types.
    """
    if isinstance(raw, dict):
        data: Any = raw
    else:
        try:
            data = json.loads(raw)
        except (ValueError, UnicodeDecodeError) as exc:
            raise EnvelopeDecodeError(str(exc)) from exc

    if not isinstance(data, dict):
        raise EnvelopeDecodeError("request must be a JSON object")

    try:
        return JsonRpcRequest.model_validate(data)
    except ValidationError as exc:
        raise EnvelopeDecodeError(_summarise(exc)) from exc


def encode_response(response: JsonRpcResponse) -> str:
    return response.to_json()


def _summarise(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "request"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)
