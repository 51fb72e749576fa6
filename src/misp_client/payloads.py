# MISP Client - Request Bodies
#
# The closed set of JSON bodies the client sends. Each variant knows
# how to render itself with to_dict(); the request executor accepts
# nothing else.

from dataclasses import dataclass
from typing import Any, Dict, Protocol, runtime_checkable


@runtime_checkable
class Serializable(Protocol):
    def to_dict(self) -> Dict[str, Any]: ...


@dataclass(frozen=True)
class RequestEnvelope:
    """``{"request": ...}`` wrapper used by most write/search endpoints."""

    request: Serializable

    def to_dict(self) -> Dict[str, Any]:
        return {"request": self.request.to_dict()}


@dataclass(frozen=True)
class TagAttachment:
    """Attach a tag, by name, to any event or attribute UUID."""

    uuid: str
    tag: str

    def to_dict(self) -> Dict[str, Any]:
        return {"uuid": self.uuid, "tag": self.tag}


@dataclass(frozen=True)
class SampleByHash:
    """downloadSample filter narrowing to one hash within an event."""

    hash: str
    event_id: int

    def to_dict(self) -> Dict[str, Any]:
        return {"hash": self.hash, "eventID": self.event_id}


@dataclass(frozen=True)
class AllSamples:
    """downloadSample filter returning every sample of an event."""

    event_id: int

    def to_dict(self) -> Dict[str, Any]:
        return {"eventID": self.event_id, "allSamples": 1}
