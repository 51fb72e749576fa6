# MISP Client
#
# Client library for the MISP threat sharing REST API: fetch and tag
# events and attributes, search attributes, record sightings, publish
# events, upload and download malware samples.

__version__ = "0.3.0"

from .base import MispAPI
from .client import MispClient
from .config import ClientConfig
from .envelopes import AttributeMatches, NoMatches, SearchResponse
from .exceptions import (
    MispConfigError,
    MispDecodeError,
    MispEmptyResultError,
    MispError,
    MispPlatformError,
    MispStatusError,
    MispTooFewResultsError,
    MispTransportError,
    SinkOpenError,
    SinkWriteError,
)
from .models import (
    Attribute,
    AttributeQuery,
    DownloadResponseFile,
    Event,
    MispObject,
    Org,
    SampleFile,
    SampleUpload,
    ServerMessage,
    Sighting,
    Tag,
    UploadResponse,
)
from .sinks import FileSink, SampleSink
from .transport import TransportConfig

__all__ = [
    # Client
    "MispAPI",
    "MispClient",
    "ClientConfig",
    "TransportConfig",
    # Data models
    "Attribute",
    "AttributeQuery",
    "DownloadResponseFile",
    "Event",
    "MispObject",
    "Org",
    "SampleFile",
    "SampleUpload",
    "ServerMessage",
    "Sighting",
    "Tag",
    "UploadResponse",
    # Search results
    "AttributeMatches",
    "NoMatches",
    "SearchResponse",
    # Sinks
    "FileSink",
    "SampleSink",
    # Errors
    "MispError",
    "MispConfigError",
    "MispTransportError",
    "MispStatusError",
    "MispDecodeError",
    "MispEmptyResultError",
    "MispTooFewResultsError",
    "MispPlatformError",
    "SinkOpenError",
    "SinkWriteError",
]
