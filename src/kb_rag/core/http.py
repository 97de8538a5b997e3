"""
Shared HTTP plumbing for the model gateways.

Both gateways POST a JSON body to the model server and read one field out
of the JSON reply. Everything that can go wrong on the way is turned into
a ProviderError so callers only have one failure type to handle.
"""

from __future__ import annotations

import logging

import httpx

from kb_rag.core.errors import ProviderError

logger = logging.getLogger(__name__)


def build_client(base_url: str, timeout: float) -> httpx.Client:
    """Create the HTTP client a gateway keeps for its lifetime."""
    return httpx.Client(base_url=base_url, timeout=httpx.Timeout(timeout))


def post_json(
    client: httpx.Client,
    path: str,
    payload: dict,
    provider: str,
) -> dict:
    """
    POST ``payload`` to ``path`` and return the decoded JSON object.

    Raises:
        ProviderError: on timeouts, connection failures, non-2xx statuses
            and replies that are not a JSON object.
    """
    try:
        response = client.post(path, json=payload)
        response.raise_for_status()
    except httpx.TimeoutException as e:
        logger.error(f"{provider} request to {path} timed out: {e}")
        raise ProviderError(f"{provider} request timed out: {e}", provider=provider) from e
    except httpx.HTTPError as e:
        logger.error(f"{provider} request to {path} failed: {e}")
        raise ProviderError(str(e), provider=provider) from e

    try:
        data = response.json()
    except ValueError as e:
        raise ProviderError(f"{provider} returned invalid JSON: {e}", provider=provider) from e

    if not isinstance(data, dict):
        raise ProviderError(f"{provider} returned unexpected payload", provider=provider)
    return data
