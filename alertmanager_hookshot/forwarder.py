"""Forward rendered message records to the hookshot webhook."""

from typing import List, Optional, Sequence

import httpx
from loguru import logger
from pydantic import BaseModel, Field

from alertmanager_hookshot.models import MessageRecord

# Upstream response bodies are kept for logging only.
MAX_DETAIL_LENGTH = 512


class DeliveryOutcome(BaseModel):
    """Result of posting a single record."""

    index: int = Field(description="Position of the record in the batch")
    ok: bool = Field(description="True when the upstream answered 2xx")
    status_code: Optional[int] = Field(
        default=None,
        description="Upstream HTTP status, None on transport errors"
    )
    detail: str = Field(
        default="",
        description="Upstream response body or transport error text"
    )


class ForwardResult(BaseModel):
    """Aggregate result of forwarding a batch of records."""

    url: str
    outcomes: List[DeliveryOutcome] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        """A batch succeeds only when every record was delivered."""
        return all(outcome.ok for outcome in self.outcomes)

    @property
    def failed(self) -> List[DeliveryOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]


def create_client(timeout: float, transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """Create the HTTP client shared by all forwarding calls.

    Args:
        timeout: HTTP timeout in seconds
        transport: Optional transport override (tests use ``httpx.MockTransport``)

    Returns:
        httpx.AsyncClient instance
    """
    return httpx.AsyncClient(timeout=timeout, transport=transport)


def webhook_url(upstream_base_url: str, route_id: str) -> str:
    return f"{upstream_base_url.rstrip('/')}/{route_id}"


async def post_record(client: httpx.AsyncClient, url: str, record: MessageRecord, index: int) -> DeliveryOutcome:
    """POST one record and classify the response.

    Transport errors are reported as a failed outcome rather than raised.
    """
    logger.debug(f"Forwarding record {index + 1} to {url}")
    try:
        response = await client.post(
            url,
            json=record.to_payload(),
            headers={"content-type": "application/json"},
        )
    except httpx.HTTPError as e:
        logger.error(f"Failed to forward record {index + 1} to {url}: {e!r}")
        return DeliveryOutcome(index=index, ok=False, detail=str(e) or type(e).__name__)

    if response.is_success:
        return DeliveryOutcome(index=index, ok=True, status_code=response.status_code)

    detail = response.text[:MAX_DETAIL_LENGTH]
    logger.error(
        f"Upstream rejected record {index + 1} for {url}: "
        f"HTTP {response.status_code} {detail}"
    )
    return DeliveryOutcome(index=index, ok=False, status_code=response.status_code, detail=detail)


async def forward(
    records: Sequence[MessageRecord],
    route_id: str,
    upstream_base_url: str,
    client: httpx.AsyncClient,
) -> ForwardResult:
    """Post each record, in order, to ``{upstream_base_url}/{route_id}``.

    Records are sent one at a time. A failed record does not stop the
    remaining ones, but any failure fails the batch.

    Args:
        records: Rendered message records
        route_id: Opaque route token, forwarded verbatim
        upstream_base_url: Hookshot webhook base URL
        client: Shared HTTP client

    Returns:
        ForwardResult with one outcome per record
    """
    url = webhook_url(upstream_base_url, route_id)
    result = ForwardResult(url=url)

    for index, record in enumerate(records):
        outcome = await post_record(client, url, record, index)
        result.outcomes.append(outcome)

    if not result.ok:
        logger.warning(f"{len(result.failed)}/{len(records)} records failed to reach {url}")
    return result
