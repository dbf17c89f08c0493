"""Remote Sync Gateway contract.

Any store reachable through a GET-all-state / POST-mutation pair satisfies it.
`submit_mutation` may return before the mutation is durably applied, so
callers confirm writes by re-reading with `fetch_snapshot`.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Mapping

from debt_tracker.config import Settings
from debt_tracker.domain.models import Snapshot


@dataclass(frozen=True)
class Credential:
    """Opaque URL/PIN pair identifying one user's store"""

    script_url: str
    pin: str

    @classmethod
    def from_settings(cls, settings: Settings) -> "Credential":
        return cls(script_url=settings.sheet_script_url, pin=settings.sheet_pin)


class SyncGateway(ABC):
    @abstractmethod
    async def fetch_snapshot(self, credential: Credential) -> Snapshot:
        """
        Read the full current state, bypassing any cache.

        Raises:
            InvalidCredentialError: URL/PIN missing or rejected
            SyncGatewayError: store unreachable or payload malformed
        """

    @abstractmethod
    async def submit_mutation(self, credential: Credential, payload: Mapping[str, Any]) -> None:
        """
        Fire-and-forget write. Completion says nothing about success.

        Raises:
            InvalidCredentialError: URL/PIN missing
            SubmissionFailedError: the request could not be sent
        """
