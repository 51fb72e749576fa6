# MISP Client - Response Envelope Decoder
#
# MISP wraps "the same" logical answer in several shapes:
#   {"Event": {...}}                 - single record keyed by type name
#   {"response": {"Attribute": []}}  - search hit list ...
#   {"response": []}                 - ... or an empty array when nothing matched
#   {"id": "42", "errors": [...]}    - upload result, id sent as a string
#   {"result": [...]}                - sample download metadata
#
# Each decoder below accepts the parsed JSON body and returns typed
# records, raising MispDecodeError with the offending payload when
# the shape is not recognised.

import json
from dataclasses import dataclass, field
from typing import Any, List, Type, TypeVar, Union

import httpx

from .exceptions import MispDecodeError, MispEmptyResultError, MispPlatformError
from .models import (
    Attribute,
    DownloadResponseFile,
    ServerMessage,
    UploadResponse,
    WireRecord,
)

R = TypeVar("R", bound=WireRecord)


def parse_json(response: httpx.Response) -> Any:
    """Parse a response body as JSON."""
    try:
        return json.loads(response.content)
    except ValueError as exc:
        raise MispDecodeError(f"Response is not valid JSON ({exc})", response.text) from exc


def decode_named(payload: Any, name: str, record_type: Type[R]) -> R:
    """Unwrap ``{"<name>": {...}}`` into ``record_type``."""
    if not isinstance(payload, dict) or name not in payload:
        raise MispDecodeError(f"Could not unmarshal {name.lower()}", payload)
    return record_type.from_dict(payload[name])


# ---------------------------------------------------------------------------
# Search envelope: {"response": <object> | []}
# ---------------------------------------------------------------------------


@dataclass
class AttributeMatches:
    """Search answered with an object holding the matching attributes."""

    attributes: List[Attribute] = field(default_factory=list)


@dataclass
class NoMatches:
    """Search answered with an empty array or null: nothing matched."""

    @property
    def attributes(self) -> List[Attribute]:
        return []


SearchResponse = Union[AttributeMatches, NoMatches]


def _as_matches(inner: Any) -> AttributeMatches:
    if not isinstance(inner, dict) or "Attribute" not in inner:
        raise ValueError("not an Attribute object")
    hits = inner["Attribute"]
    if hits is None:
        return AttributeMatches()
    if not isinstance(hits, list):
        raise ValueError("Attribute is not a list")
    return AttributeMatches([Attribute.from_dict(hit) for hit in hits])


def _as_no_matches(inner: Any) -> NoMatches:
    if inner is None:
        return NoMatches()
    if not isinstance(inner, list) or inner:
        raise ValueError("not an empty array or null")
    return NoMatches()


def decode_search_response(payload: Any) -> SearchResponse:
    """Decode a restSearch envelope.

    The object form is tried first, then the empty-array form. A null
    response, or a null ``Attribute`` list, decodes as empty. Anything
    else is a format error.
    """
    if not isinstance(payload, dict) or "response" not in payload:
        raise MispDecodeError("Could not unmarshal response", payload)

    inner = payload["response"]
    for variant in (_as_matches, _as_no_matches):
        try:
            return variant(inner)
        except ValueError:
            continue
    raise MispDecodeError("Inner structure has unknown format", inner)


# ---------------------------------------------------------------------------
# Upload envelope
# ---------------------------------------------------------------------------


def _error_list(errors: Any) -> List[str]:
    if not errors:
        return []
    if isinstance(errors, str):
        return [errors]
    if isinstance(errors, list):
        return [str(e) for e in errors]
    if isinstance(errors, dict):
        return [f"{k}: {v}" for k, v in errors.items()]
    return [str(errors)]


def decode_upload_response(payload: Any) -> UploadResponse:
    """Decode an upload_sample result.

    A non-empty ``errors`` entry fails the call even though the HTTP
    status was 200.
    """
    if not isinstance(payload, dict):
        raise MispDecodeError("Could not unmarshal response", payload)

    errors = _error_list(payload.get("errors"))
    if errors:
        raise MispPlatformError(errors, payload)

    raw_id = payload.get("id")
    try:
        upload_id = int(str(raw_id), 10)
    except ValueError as exc:
        raise MispDecodeError("Upload id is not a decimal number", raw_id) from exc

    return UploadResponse(
        id=upload_id,
        raw_id=str(raw_id),
        url=payload.get("url") or "",
        message=payload.get("message") or "",
        name=payload.get("name") or "",
    )


# ---------------------------------------------------------------------------
# Download metadata / acknowledgements
# ---------------------------------------------------------------------------


def decode_download_response(payload: Any) -> List[DownloadResponseFile]:
    """Decode ``{"result": [...]}`` sample descriptors; empty is an error."""
    if not isinstance(payload, dict):
        raise MispDecodeError("Error decoding response", payload)

    result = payload.get("result")
    if not result:
        raise MispEmptyResultError("No results")
    if not isinstance(result, list):
        raise MispDecodeError("Error decoding response", payload)
    return [DownloadResponseFile.from_dict(item) for item in result]


def decode_message(payload: Any) -> ServerMessage:
    return ServerMessage.from_dict(payload)
