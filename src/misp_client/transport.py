# MISP Client - Transport Configuration
#
# TLS verification and timeout are fixed per client instance and
# turned into an httpx.Client for every exchange. Nothing here touches
# process-wide defaults.

from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx


@dataclass(frozen=True)
class TransportConfig:
    """Client-scoped HTTP settings.

    Attributes:
        insecure: Accept self-signed or otherwise invalid server
            certificates. Off unless explicitly requested.
        timeout: Seconds allowed for a whole exchange. ``None`` or 0
            means no limit.
        transport: Optional httpx transport to send through instead
            of the network (e.g. ``httpx.MockTransport``).
    """

    insecure: bool = False
    timeout: Optional[float] = None
    transport: Optional[httpx.BaseTransport] = None

    @property
    def verify(self) -> bool:
        return not self.insecure

    @property
    def effective_timeout(self) -> Optional[float]:
        return self.timeout or None

    def client_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "verify": self.verify,
            "timeout": self.effective_timeout,
        }
        if self.transport is not None:
            kwargs["transport"] = self.transport
        return kwargs

    def open(self) -> httpx.Client:
        return httpx.Client(**self.client_kwargs())
