"""HKP-specific configuration options."""

from __future__ import annotations

from hockeypuck.config import Settings
from hockeypuck.config import config as _global_config


class HkpSettings(Settings):
    """Settings with accessors for the HKP and HKPS listeners."""

    def http_bind(self) -> str:
        return self.get_string_default("hockeypuck.hkp.bind", ":11371")

    def https_bind(self) -> str:
        return self.get_string_default("hockeypuck.hkps.bind", "")

    def tls_certificate(self) -> str:
        return self.get_string_default("hockeypuck.hkps.cert", "")

    def tls_key(self) -> str:
        return self.get_string_default("hockeypuck.hkps.key", "")


def config() -> HkpSettings:
    """Return HKP settings sharing the global configuration."""
    base = _global_config()
    if base is None:
        raise RuntimeError("configuration has not been loaded")
    return HkpSettings(base.tree)