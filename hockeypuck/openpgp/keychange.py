"""Descriptions of changes made to stored public keys."""

from __future__ import annotations

import base64
import secrets
from dataclasses import dataclass
from enum import IntEnum

# Random bytes behind a unique identifier: about 256 bits once Ascii85 encoded.
UUID_LEN = 40


class KeyChangeType(IntEnum):
    """Kind of change an update made to a public key."""

    INVALID = 0
    NOT_CHANGED = 1
    ADDED = 2
    MODIFIED = 3


@dataclass
class KeyChange:
    """The change made to a public key by adding or merging key material."""

    fingerprint: str = ""
    current_md5: str = ""
    previous_md5: str = ""
    current_sha256: str = ""
    previous_sha256: str = ""
    error: Exception | None = None
    type: KeyChangeType = KeyChangeType.INVALID

    def calc_type(self) -> KeyChangeType:
        """Work out the kind of change from the digests before and after."""
        if self.current_sha256 == "":
            return KeyChangeType.INVALID
        if self.previous_sha256 == "":
            return KeyChangeType.ADDED
        if self.previous_sha256 == self.current_sha256:
            return KeyChangeType.NOT_CHANGED
        return KeyChangeType.MODIFIED

    def __str__(self) -> str:
        if self.type is KeyChangeType.INVALID:
            msg = f"Invalid key change for [{self.fingerprint}] could not be processed"
        elif self.type is KeyChangeType.ADDED:
            msg = f"Add key {self.fingerprint}, [{self.current_sha256[:8]}..]"
        elif self.type is KeyChangeType.MODIFIED:
            msg = (
                f"Modify key {self.fingerprint}, "
                f"[{self.previous_sha256[:8]}.. -> {self.current_sha256[:8]}..]"
            )
        else:
            msg = f"No change in key {self.fingerprint}"
        if self.error is not None:
            msg += f": Error: {self.error}"
        return msg


def new_uuid() -> str:
    """Return a new random unique identifier, Ascii85 encoded."""
    return base64.a85encode(secrets.token_bytes(UUID_LEN)).decode("ascii")