"""
Sender Policy

Whitelist applied to the SMTP envelope sender (MAIL FROM).
"""

from typing import FrozenSet, Iterable

from mailsink.core.exceptions import SenderRejectedException


class SenderPolicy:
    """
    Envelope sender whitelist.

    An empty whitelist accepts every sender. Otherwise the address must be
    listed verbatim: matching is case-sensitive and nothing is normalized.
    """

    def __init__(self, allowed: Iterable[str] = ()):
        self._allowed: FrozenSet[str] = frozenset(allowed)

    @property
    def allowed(self) -> FrozenSet[str]:
        return self._allowed

    def is_allowed(self, address: str) -> bool:
        if not self._allowed:
            return True
        return address in self._allowed

    def ensure_allowed(self, address: str) -> None:
        """
        Raise if the sender is not whitelisted.

        Raises:
            SenderRejectedException: If the address is not allowed
        """
        if not self.is_allowed(address):
            raise SenderRejectedException(address)
