# MISP Client - Domain Models
#
# Structured records exchanged with the MISP REST API:
#   Attribute  - a single indicator of compromise
#   Event      - an incident record, aggregating attributes/tags/objects
#   MispObject - a named group of related attributes inside an event
#   Tag, Org   - labels and organisations embedded in events
#   Sighting   - an observation that a value was seen
#   SampleUpload / SampleFile - base64 samples attached to an event
#   AttributeQuery - restSearch filter parameters
#
# Every record knows its wire names and whether empty fields are
# dropped on serialization.

from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Type, TypeVar

from .exceptions import MispDecodeError, MispError, MispTooFewResultsError

if TYPE_CHECKING:
    from .base import MispAPI

R = TypeVar("R", bound="WireRecord")


def wire(name: Optional[str] = None, *, nested: Optional[type] = None,
         many: bool = False, default: Any = ""):
    """Declare a dataclass field with its JSON name on the wire.

    ``nested`` names a WireRecord type the value decodes into;
    ``many`` marks it as a list of them, or a list of plain values
    when ``nested`` is not given.
    """
    metadata = {"wire": name, "nested": nested, "many": many}
    if many:
        return field(default_factory=list, metadata=metadata)
    if nested is not None:
        return field(default=None, metadata=metadata)
    return field(default=default, metadata=metadata)


class WireRecord:
    """Mixin giving dataclasses a JSON mapping form.

    Subclasses set ``omit_empty`` when the platform expects empty
    values to be left out of the payload rather than sent blank.
    """

    omit_empty = False

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if self.omit_empty and not value:
                continue
            nested = f.metadata.get("nested")
            if f.metadata.get("many"):
                value = [item.to_dict() for item in value] if nested else list(value)
            elif nested is not None and value is not None:
                value = value.to_dict()
            result[f.metadata.get("wire") or f.name] = value
        return result

    @classmethod
    def from_dict(cls: Type[R], data: Any) -> R:
        if not isinstance(data, dict):
            raise MispDecodeError(f"Expected an object for {cls.__name__}", data)

        lowered = {str(k).lower(): v for k, v in data.items()}
        kwargs: Dict[str, Any] = {}
        for f in fields(cls):
            key = f.metadata.get("wire") or f.name
            if key in data:
                value = data[key]
            elif key.lower() in lowered:
                value = lowered[key.lower()]
            else:
                continue

            nested = f.metadata.get("nested")
            if f.metadata.get("many"):
                if value is None:
                    value = []
                elif not isinstance(value, list):
                    raise MispDecodeError(f"Expected a list for {cls.__name__}.{key}", value)
                elif nested is not None:
                    value = [nested.from_dict(item) for item in value]
                else:
                    value = list(value)
            elif nested is not None and value is not None:
                value = nested.from_dict(value)
            kwargs[f.name] = value
        return cls(**kwargs)


# ---------------------------------------------------------------------------
# Event building blocks
# ---------------------------------------------------------------------------


@dataclass
class Attribute(WireRecord):
    """A single indicator of compromise.

    ``id`` and ``uuid`` are assigned by the platform on creation.
    """

    omit_empty = True

    id: str = wire()
    uuid: str = wire()
    event_id: str = wire()
    object_id: str = wire()
    object_relation: str = wire()
    type: str = wire()
    category: str = wire()
    value: str = wire()
    comment: str = wire()
    filename: str = wire()
    distribution: str = wire()
    sharing_group_id: str = wire()
    timestamp: str = wire()
    to_ids: bool = wire(default=False)
    disable_correlation: bool = wire(default=False)
    deleted: bool = wire(default=False)

    def add_tag(self, client: "MispAPI", tag_name: str) -> None:
        """Attach ``tag_name`` to this attribute."""
        client.add_tag(self.uuid, tag_name)


@dataclass
class Tag(WireRecord):
    id: str = wire()
    name: str = wire()
    colour: str = wire()
    exportable: bool = wire(default=False)


@dataclass
class Org(WireRecord):
    id: str = wire()
    name: str = wire()
    uuid: str = wire()


@dataclass
class MispObject(WireRecord):
    """A named grouping of related attributes within one event."""

    id: str = wire()
    name: str = wire()
    meta_category: str = wire("meta-category")
    description: str = wire()
    event_id: str = wire()
    uuid: str = wire()
    timestamp: str = wire()
    attributes: List[Attribute] = wire("Attribute", nested=Attribute, many=True)


@dataclass
class Event(WireRecord):
    """An incident record.

    An event fetched through a client is bound to it (see ``bind``)
    so follow-up calls such as tagging or sample download reuse the
    same credentials. The binding is not part of the record and is
    never serialized.
    """

    id: str = wire()
    uuid: str = wire()
    info: str = wire()
    date: str = wire()
    attributes: List[Attribute] = wire("Attribute", nested=Attribute, many=True)
    tags: List[Tag] = wire("Tag", nested=Tag, many=True)
    objects: List[MispObject] = wire("Object", nested=MispObject, many=True)
    org: Optional[Org] = wire("Org", nested=Org)
    orgc: Optional[Org] = wire("Orgc", nested=Org)

    def __post_init__(self):
        self._client: Optional["MispAPI"] = None

    def bind(self, client: "MispAPI") -> "Event":
        self._client = client
        return self

    @property
    def client(self) -> "MispAPI":
        if self._client is None:
            raise MispError(f"Event {self.id or '?'} is not bound to a client")
        return self._client

    def add_tag(self, tag_name: str) -> None:
        """Attach ``tag_name`` to this event."""
        self.client.add_tag(self.uuid, tag_name)

    def download_sample_by_hash(self, sample_hash: str, filename: str) -> None:
        """Download the sample matching ``sample_hash`` to ``filename``."""
        results = self.client.download_samples_metadata(self.id, sample_hash=sample_hash)
        self.client.download_attachment(results[0].attribute_id, filename)

    def download_nth_sample(self, n: int, filename: str) -> None:
        """Download the ``n``th sample (starting at 0) to ``filename``.

        Raises MispTooFewResultsError without writing anything when
        the event has ``n`` samples or fewer.
        """
        results = self.client.download_samples_metadata(self.id)
        if n < 0 or len(results) <= n:
            raise MispTooFewResultsError(len(results), n)
        self.client.download_attachment(results[n].attribute_id, filename)

    def download_all_samples(self, filename_pattern: str) -> List[str]:
        """Download every sample of the event.

        ``filename_pattern`` must contain a ``%d`` placeholder that is
        replaced by the sample index. Returns the written file names.
        An unusable pattern raises MispError before any request is sent.
        """
        try:
            filename_pattern % 0
        except (TypeError, ValueError) as exc:
            raise MispError(f"Invalid filename pattern {filename_pattern!r}: {exc}") from exc

        results = self.client.download_samples_metadata(self.id)
        written: List[str] = []
        for n, result in enumerate(results):
            filename = filename_pattern % n
            self.client.download_attachment(result.attribute_id, filename)
            written.append(filename)
        return written


# ---------------------------------------------------------------------------
# Write-side records
# ---------------------------------------------------------------------------


@dataclass
class Sighting(WireRecord):
    """A timestamped observation of one or more values."""

    omit_empty = True

    id: str = wire()
    uuid: str = wire()
    value: str = wire()
    values: List[str] = wire(many=True)
    timestamp: int = wire(default=0)


@dataclass
class SampleFile(WireRecord):
    omit_empty = True

    filename: str = wire()
    data: str = wire()  # base64


@dataclass
class SampleUpload(WireRecord):
    """A batch of samples to attach to an event.

    Either ``event_id`` (existing event) or ``info`` (new event) must
    be supplied.
    """

    omit_empty = True

    files: List[SampleFile] = wire(nested=SampleFile, many=True)
    distribution: str = wire()
    comment: str = wire()  # comment field of every created attribute
    event_id: str = wire()
    to_ids: bool = wire(default=False)
    category: str = wire()
    info: str = wire()  # event info when no event_id is given


@dataclass
class AttributeQuery(WireRecord):
    """restSearch filter parameters. Unset fields are not sent."""

    omit_empty = True

    # Search for the given value in the attributes' value field.
    value: str = wire()

    # Any valid MISP attribute type.
    type: str = wire()

    # Any valid MISP attribute category.
    category: str = wire()

    # Creator organisation identifier.
    org: str = wire()

    # Tag names; prefix with '!' to exclude, chain with '&&'. Colons
    # cannot be used, write semicolons instead.
    tags: str = wire()

    # Event date bounds, format 2015-02-15.
    from_date: str = wire("from")
    to_date: str = wire("to")

    # Published within the last 5d, 12h, 30m, ...
    last: str = wire()

    # Events to include/exclude.
    event_id: str = wire("eventid")

    # Include attachments/encrypted samples in the export.
    with_attachments: str = wire("withAttachments")

    # Only fetch event metadata, skip attributes.
    metadata: str = wire()

    # Attribute UUID, or the event's UUID.
    uuid: str = wire()


# ---------------------------------------------------------------------------
# Response records
# ---------------------------------------------------------------------------


@dataclass
class DownloadResponseFile(WireRecord):
    """One sample descriptor from a downloadSample query."""

    md5: str = wire()
    base64: str = wire()
    filename: str = wire()
    attribute_id: str = wire()
    event_id: str = wire()
    event_info: str = wire()


@dataclass
class UploadResponse:
    id: int
    raw_id: str = ""
    url: str = ""
    message: str = ""
    name: str = ""
    errors: List[str] = field(default_factory=list)


@dataclass
class ServerMessage(WireRecord):
    """Acknowledgement returned by write endpoints such as sightings.

    The decoded mapping is kept on ``raw``; it is not a record field.
    """

    name: str = wire()
    message: str = wire()
    url: str = wire()
    errors: Any = wire(default=None)
    saved: Optional[bool] = wire(default=None)
    success: Optional[bool] = wire(default=None)

    def __post_init__(self):
        self.raw: Dict[str, Any] = {}

    @classmethod
    def from_dict(cls, data: Any) -> "ServerMessage":
        message = super().from_dict(data)
        message.raw = dict(data)
        return message
