"""Shared-passphrase access gate."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AccessGate:
    """Compares a submitted passphrase with the club's shared one.

    This only keeps casual visitors out of the pages; it does not protect the
    record store.
    """

    passphrase: str

    def allows(self, candidate: str | None) -> bool:
        return bool(candidate) and candidate == self.passphrase
