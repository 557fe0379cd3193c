"""OpenPGP configuration options and PKS mail synchronisation state."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from hockeypuck.config import Settings
from hockeypuck.config import config as _global_config

# Largest backoff multiplier, in minutes, after mail delivery errors.
MAX_DELAY = 60


class OpenPGPSettings(Settings):
    """Settings with accessors for outbound PKS synchronisation."""

    def pks_from(self) -> str:
        return self.get_string("hockeypuck.openpgp.pks.from")

    def pks_to(self) -> list[str]:
        return self.get_strings("hockeypuck.openpgp.pks.to")

    def smtp_host(self) -> str:
        return self.get_string_default(
            "hockeypuck.openpgp.pks.smtp.host", "localhost:25"
        )

    def smtp_id(self) -> str:
        return self.get_string("hockeypuck.openpgp.pks.smtp.id")

    def smtp_user(self) -> str:
        return self.get_string("hockeypuck.openpgp.pks.smtp.user")

    def smtp_pass(self) -> str:
        return self.get_string("hockeypuck.openpgp.pks.smtp.pass")


@dataclass
class PksStatus:
    """Synchronisation state of one downstream PKS server."""

    addr: str
    last_sync: datetime


def smtp_auth_host(host: str) -> str:
    """Strip the port from an SMTP host, leaving the name used for authentication."""
    return host.split(":")[0]


def next_delay(delay: int, failed: bool) -> int:
    """Return the next polling delay in minutes after a sync attempt."""
    if not failed:
        return 1
    return min(delay + 1, MAX_DELAY)


def config() -> OpenPGPSettings:
    """Return OpenPGP settings sharing the global configuration."""
    base = _global_config()
    if base is None:
        raise RuntimeError("configuration has not been loaded")
    return OpenPGPSettings(base.tree)