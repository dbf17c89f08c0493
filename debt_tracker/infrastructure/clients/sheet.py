"""Spreadsheet script endpoint client (GET snapshot, POST mutation)"""

import logging
import time
from typing import Any, Mapping

import httpx
from pydantic import ValidationError

from debt_tracker.config import settings
from debt_tracker.domain.exceptions import (
    InvalidCredentialError,
    SnapshotSchemaError,
    SubmissionFailedError,
    SyncGatewayError,
)
from debt_tracker.domain.models import Snapshot
from debt_tracker.infrastructure.clients.gateway import Credential, SyncGateway
from debt_tracker.infrastructure.clients.schemas import SnapshotPayload
from debt_tracker.infrastructure.observability.metrics import (
    mutation_latency_histogram,
    snapshot_fetch_failures_counter,
)

logger = logging.getLogger(__name__)


def _require(credential: Credential) -> None:
    if not credential.script_url:
        raise InvalidCredentialError("Script URL is not configured")
    if not credential.pin:
        raise InvalidCredentialError("PIN is not configured")


class SheetClient(SyncGateway):
    """Client for a spreadsheet exposed through an HTTP script endpoint"""

    def __init__(
        self,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport, follow_redirects=True)

    async def fetch_snapshot(self, credential: Credential) -> Snapshot:
        """
        Fetch every pending expense, ledger entry and account.

        A millisecond timestamp query parameter defeats intermediary caches
        so a read issued right after a write never sees a cached response.

        Raises:
            InvalidCredentialError: missing URL/PIN, or the store rejected the PIN
            SyncGatewayError: timeout, transport or HTTP error
            SnapshotSchemaError: body is not JSON or does not match the schema
        """
        _require(credential)

        async with self._client() as client:
            try:
                response = await client.get(
                    credential.script_url,
                    params={"pin": credential.pin, "t": int(time.time() * 1000)},
                    headers={"Cache-Control": "no-cache"},
                )
                response.raise_for_status()
                data = response.json()

            except httpx.TimeoutException as e:
                snapshot_fetch_failures_counter.inc()
                raise SyncGatewayError(f"Spreadsheet endpoint timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                snapshot_fetch_failures_counter.inc()
                raise SyncGatewayError(f"Spreadsheet endpoint error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                snapshot_fetch_failures_counter.inc()
                raise SyncGatewayError(f"Spreadsheet endpoint unreachable: {e}") from e
            except ValueError as e:
                snapshot_fetch_failures_counter.inc()
                raise SnapshotSchemaError(f"Snapshot is not valid JSON: {e}") from e

        # The script reports a rejected PIN as a 200 with an error body
        if isinstance(data, dict) and data.get("error"):
            raise InvalidCredentialError(str(data["error"]))

        try:
            payload = SnapshotPayload.model_validate(data)
        except ValidationError as e:
            snapshot_fetch_failures_counter.inc()
            raise SnapshotSchemaError(f"Snapshot does not match schema: {e}") from e

        return payload.to_domain()

    async def submit_mutation(self, credential: Credential, payload: Mapping[str, Any]) -> None:
        """
        POST a form-encoded mutation.

        The response is opaque by contract (the script answers cross-origin
        writes without a readable body), so only transport failures are errors.
        Not retried: the store appends ledger rows and a resend could duplicate them.
        """
        _require(credential)
        form = {key: str(value) for key, value in payload.items() if value is not None}
        form["pin"] = credential.pin

        async with self._client() as client:
            try:
                with mutation_latency_histogram.time():
                    response = await client.post(credential.script_url, data=form)
            except httpx.RequestError as e:
                raise SubmissionFailedError(f"Could not send mutation: {e}") from e

        logger.debug("Mutation sent", extra={"status_code": response.status_code, "sheet": form.get("sheet")})
