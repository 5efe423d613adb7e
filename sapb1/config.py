from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """Configuration for the Service Layer HTTP client.

    Security notes:
    - verify_tls defaults to True. Disabling it is meant for test servers
      with self-signed certificates only.

    """

    timeout_sec: float = 30.0
    verify_tls: bool = True
    cafile: Optional[str] = None
    log_level: str = "INFO"

    @staticmethod
    def from_env() -> "ClientConfig":
        """Create a config from environment variables.

        - SAPB1_TIMEOUT_SEC (default 30)
        - SAPB1_VERIFY_TLS (default 1)
        - SAPB1_CAFILE (default unset)
        - SAPB1_LOG_LEVEL (default INFO)

        """

        return ClientConfig(
            timeout_sec=_env_float("SAPB1_TIMEOUT_SEC", 30.0),
            verify_tls=_env_bool("SAPB1_VERIFY_TLS", True),
            cafile=(os.environ.get("SAPB1_CAFILE") or None),
            log_level=os.environ.get("SAPB1_LOG_LEVEL", "INFO").strip().upper() or "INFO",
        )

    def tls_options(self) -> Dict[str, Any]:
        """TLS options in the shape the transport expects."""

        opts: Dict[str, Any] = {}
        if self.cafile:
            opts["cafile"] = self.cafile
        if not self.verify_tls:
            opts["verify_peer"] = False
            opts["verify_peer_name"] = False
        return opts


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return float(default)
    try:
        return float(raw)
    except ValueError:
        return float(default)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    if raw in {"1", "true", "yes", "on"}:
        return True
    if raw in {"0", "false", "no", "off"}:
        return False
    return default
