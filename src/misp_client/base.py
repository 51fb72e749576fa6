# MISP Client - API Contract
#
# Lists every remote capability the client exposes. MispClient is the
# HTTP implementation; records bound to a client (Event) only depend
# on this contract, so tests and callers can substitute their own.

from abc import ABC, abstractmethod
from typing import List, Optional, Union

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


class MispAPI(ABC):
    """Abstract base class for MISP API clients."""

    @property
    @abstractmethod
    def base_url(self) -> str:
        """Base URL of the MISP instance."""

    @abstractmethod
    def get_event(self, event_id: Union[str, int]) -> Event:
        """Fetch an event by ID or UUID."""

    @abstractmethod
    def get_attribute(self, attr_id: Union[str, int]) -> Attribute:
        """Fetch an attribute by ID or UUID."""

    @abstractmethod
    def publish_event(self, event_id: Union[str, int], email: bool = False) -> None:
        """Publish an event, optionally alerting subscribers by e-mail."""

    @abstractmethod
    def add_sighting(self, sighting: Sighting) -> ServerMessage:
        """Record a sighting."""

    @abstractmethod
    def add_tag(self, uuid: str, tag_name: str) -> None:
        """Attach a tag to the event or attribute with ``uuid``."""

    @abstractmethod
    def search_attributes(self, query: AttributeQuery) -> List[Attribute]:
        """Run an attribute restSearch."""

    @abstractmethod
    def upload_sample(self, sample: SampleUpload) -> UploadResponse:
        """Upload base64 samples to an event."""

    @abstractmethod
    def download_samples_metadata(
        self,
        event_id: Union[str, int],
        sample_hash: Optional[str] = None,
    ) -> List[DownloadResponseFile]:
        """List sample descriptors of an event, optionally for one hash."""

    @abstractmethod
    def download_attachment(self, attribute_id: Union[str, int], filename: str) -> None:
        """Stream the raw attachment of an attribute to ``filename``."""
