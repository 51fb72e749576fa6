# MISP Client - Configuration
#
# Connection settings for a MISP instance. Values come from explicit
# arguments or from the environment (optionally seeded from a .env
# file):
#   MISP_URL       base URL, e.g. https://misp.example.org
#   MISP_API_KEY   automation key, sent verbatim in Authorization
#   MISP_INSECURE  1/true/yes/on to skip TLS certificate checks
#   MISP_TIMEOUT   per-request timeout in seconds (0 = none)

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from .exceptions import MispConfigError

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ClientConfig:
    base_url: str
    api_key: str
    insecure: bool = False
    timeout: Optional[float] = None

    def __post_init__(self):
        if not self.base_url:
            raise MispConfigError("MISP base URL is not set (MISP_URL)")
        if not self.api_key:
            raise MispConfigError("MISP API key is not set (MISP_API_KEY)")

    @classmethod
    def from_env(
        cls,
        env_file: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
        **overrides,
    ) -> "ClientConfig":
        """Build a config from environment variables.

        Args:
            env_file: Optional .env file loaded first. Variables already
                present in the environment win.
            environ: Mapping to read instead of ``os.environ``.
            **overrides: ``base_url``, ``api_key``, ``insecure`` or
                ``timeout`` values taking precedence over the
                environment. ``None`` values are ignored.
        """
        if env_file:
            load_dotenv(env_file, override=False)
        env = os.environ if environ is None else environ

        timeout_raw = env.get("MISP_TIMEOUT", "").strip()
        try:
            timeout = float(timeout_raw) if timeout_raw else None
        except ValueError as exc:
            raise MispConfigError(f"MISP_TIMEOUT is not a number: {timeout_raw!r}") from exc

        values = {
            "base_url": env.get("MISP_URL", "").strip(),
            "api_key": env.get("MISP_API_KEY", "").strip(),
            "insecure": env.get("MISP_INSECURE", "").strip().lower() in _TRUTHY,
            "timeout": timeout,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
