# MISP Client - HTTP Client
#
# Concrete MispAPI over the MISP REST API.
#
#   do()  - one authenticated JSON exchange; only HTTP 200 is success
#   get() / post() - thin wrappers around do()
#   get_event, get_attribute, publish_event, add_sighting, add_tag,
#   search_attributes, upload_sample, download_samples_metadata,
#   download_attachment - one method per remote capability
#
# No retries: every error is raised to the caller.

import json
import logging
from typing import BinaryIO, Dict, List, Optional, Union

import httpx

from .base import MispAPI
from .config import ClientConfig
from .envelopes import (
    SearchResponse,
    decode_download_response,
    decode_message,
    decode_named,
    decode_search_response,
    decode_upload_response,
    parse_json,
)
from .exceptions import (
    MispError,
    MispStatusError,
    MispTransportError,
    SinkOpenError,
    SinkWriteError,
)
from .models import (
    Attribute,
    AttributeQuery,
    DownloadResponseFile,
    Event,
    SampleUpload,
    ServerMessage,
    Sighting,
    UploadResponse,
)
from .payloads import AllSamples, RequestEnvelope, SampleByHash, Serializable, TagAttachment
from .sinks import FileSink, SampleSink
from .transport import TransportConfig

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


def _numeric_id(value: Union[str, int], what: str) -> int:
    try:
        return int(str(value), 10)
    except ValueError as exc:
        raise MispError(f"{what} id is not numeric: {value!r}") from exc


class MispClient(MispAPI):
    """MISP REST API client.

    Usage::

        client = MispClient("https://misp.example.org", api_key="...")
        event = client.get_event("42")
        event.add_tag("tlp:red")

    Configuration is fixed at construction; the client holds no other
    state and may be shared between threads.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        insecure: bool = False,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
        sink: Optional[SampleSink] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._transport = TransportConfig(
            insecure=insecure, timeout=timeout, transport=transport,
        )
        self._sink: SampleSink = sink or FileSink()

    @classmethod
    def from_config(cls, config: ClientConfig, **kwargs) -> "MispClient":
        return cls(
            config.base_url,
            config.api_key,
            insecure=config.insecure,
            timeout=config.timeout,
            **kwargs,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def transport_config(self) -> TransportConfig:
        return self._transport

    # ------------------------------------------------------------------
    # Request executor
    # ------------------------------------------------------------------

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": self._api_key,
            "Content-Type": JSON_CONTENT_TYPE,
            "Accept": JSON_CONTENT_TYPE,
        }

    def do(
        self,
        method: str,
        path: str,
        payload: Optional[Serializable] = None,
    ) -> httpx.Response:
        """Send one authenticated request and return the response.

        ``payload`` is JSON-encoded into the body; ``None`` sends no
        body. Raises MispStatusError (carrying the response) for any
        status other than 200, and MispTransportError when no response
        was received.
        """
        content: Optional[bytes] = None
        if payload is not None:
            if not isinstance(payload, Serializable):
                raise TypeError(
                    f"payload must provide to_dict(), got {type(payload).__name__}"
                )
            content = json.dumps(payload.to_dict()).encode("utf-8")

        try:
            with self._transport.open() as http:
                resp = http.request(
                    method, self._url(path), content=content, headers=self._headers(),
                )
        except httpx.HTTPError as exc:
            raise MispTransportError(f"{method} {path} failed: {exc}") from exc

        logger.debug("MISP %s %s -> %d", method, path, resp.status_code)
        if resp.status_code != httpx.codes.OK:
            raise MispStatusError(resp)
        return resp

    def get(self, path: str, payload: Optional[Serializable] = None) -> httpx.Response:
        return self.do("GET", path, payload)

    def post(self, path: str, payload: Optional[Serializable] = None) -> httpx.Response:
        return self.do("POST", path, payload)

    # ------------------------------------------------------------------
    # Events & attributes
    # ------------------------------------------------------------------

    def get_event(self, event_id: Union[str, int]) -> Event:
        """Fetch an event; the result is bound to this client."""
        resp = self.get(f"/events/{event_id}")
        event = decode_named(parse_json(resp), "Event", Event)
        return event.bind(self)

    def get_attribute(self, attr_id: Union[str, int]) -> Attribute:
        resp = self.get(f"/attributes/{attr_id}")
        return decode_named(parse_json(resp), "Attribute", Attribute)

    def publish_event(self, event_id: Union[str, int], email: bool = False) -> None:
        """Publish an event. With ``email`` subscribers are alerted."""
        action = "alert" if email else "publish"
        self.post(f"/events/{action}/{event_id}")

    def add_sighting(self, sighting: Sighting) -> ServerMessage:
        resp = self.post("/sightings/add/", RequestEnvelope(sighting))
        return decode_message(parse_json(resp))

    def add_tag(self, uuid: str, tag_name: str) -> None:
        """Attach ``tag_name`` to the event or attribute identified by ``uuid``."""
        self.post("/tags/attachTagToObject", TagAttachment(uuid=uuid, tag=tag_name))

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search_attributes_response(self, query: AttributeQuery) -> SearchResponse:
        """Run a restSearch and return the decoded envelope variant.

        ``NoMatches`` means the platform answered with an empty result.
        """
        resp = self.post("/attributes/restSearch/json/", RequestEnvelope(query))
        return decode_search_response(parse_json(resp))

    def search_attributes(self, query: AttributeQuery) -> List[Attribute]:
        return self.search_attributes_response(query).attributes

    # ------------------------------------------------------------------
    # Samples
    # ------------------------------------------------------------------

    def upload_sample(self, sample: SampleUpload) -> UploadResponse:
        """Upload samples. Errors reported in the body raise MispPlatformError."""
        resp = self.post(f"/events/upload_sample/{sample.event_id}", RequestEnvelope(sample))
        return decode_upload_response(parse_json(resp))

    def download_samples_metadata(
        self,
        event_id: Union[str, int],
        sample_hash: Optional[str] = None,
    ) -> List[DownloadResponseFile]:
        """List the samples of an event.

        With ``sample_hash`` only the matching sample is returned;
        otherwise every sample is. Raises MispEmptyResultError when
        nothing matches.
        """
        eid = _numeric_id(event_id, "event")
        if sample_hash:
            request: Serializable = SampleByHash(hash=sample_hash, event_id=eid)
        else:
            request = AllSamples(event_id=eid)
        resp = self.get("/attributes/downloadSample/", RequestEnvelope(request))
        return decode_download_response(parse_json(resp))

    def download_attachment(self, attribute_id: Union[str, int], filename: str) -> None:
        """Stream the raw attachment of an attribute into ``filename``.

        The destination is only opened once the server answered 200.
        A failure while copying leaves a partially written file.
        """
        aid = _numeric_id(attribute_id, "attribute")
        path = f"/attributes/downloadAttachment/download/{aid}"

        with self._transport.open() as http:
            request = http.build_request(
                "GET", self._url(path), headers={"Authorization": self._api_key},
            )
            try:
                resp = http.send(request, stream=True)
            except httpx.HTTPError as exc:
                raise MispTransportError(f"Error downloading attachment: {exc}") from exc

            try:
                logger.debug("MISP GET %s -> %d", path, resp.status_code)
                if resp.status_code != httpx.codes.OK:
                    resp.read()
                    raise MispStatusError(resp)
                self._copy_to_sink(resp, filename)
            finally:
                resp.close()

    def _open_sink(self, filename: str) -> BinaryIO:
        try:
            return self._sink.open(filename)
        except SinkOpenError:
            raise
        except OSError as exc:
            raise SinkOpenError(filename, exc) from exc

    def _copy_to_sink(self, resp: httpx.Response, filename: str) -> None:
        handle = self._open_sink(filename)
        try:
            for chunk in resp.iter_bytes():
                handle.write(chunk)
        except (OSError, httpx.HTTPError) as exc:
            raise SinkWriteError(filename, exc) from exc
        finally:
            handle.close()

    def __repr__(self) -> str:
        return f"MispClient(base_url={self._base_url!r}, insecure={self._transport.insecure})"
