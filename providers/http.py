from __future__ import annotations  # HTTP transport shared by provider adapters

import logging
from typing import Any, Dict, Optional, Tuple

import httpx

from providers.base import ProviderError, ProviderTimeout


logger = logging.getLogger(__name__)

_ERROR_BODY_PREVIEW = 200


def _preview(text: str) -> str:  # Trim provider error bodies for messages
    text = (text or "").strip().replace("\n", " ")
    if len(text) > _ERROR_BODY_PREVIEW:
        return text[: _ERROR_BODY_PREVIEW - 3] + "..."
    return text


def post(
    client: httpx.Client,
    url: str,
    *,
    provider: str,
    timeout: float,
    headers: Optional[Dict[str, str]] = None,
    params: Optional[Dict[str, str]] = None,
    json: Optional[Dict[str, Any]] = None,
    data: Optional[Dict[str, Any]] = None,
    files: Optional[Dict[str, Tuple[str, bytes, str]]] = None,
) -> Any:  # POST and decode a JSON body, mapping failures to ProviderError
    try:
        response = client.post(
            url,
            headers=headers,
            params=params,
            json=json,
            data=data,
            files=files,
            timeout=timeout,
        )
    except httpx.TimeoutException as exc:
        raise ProviderTimeout(f"{provider} request timed out after {timeout:.1f}s", provider=provider) from exc
    except httpx.HTTPError as exc:
        raise ProviderError(f"{provider} transport failed: {exc}", provider=provider) from exc
    if response.status_code >= 400:
        raise ProviderError(
            f"{provider} returned status {response.status_code}: {_preview(response.text)}",
            provider=provider,
            status_code=response.status_code,
        )
    try:
        return response.json()
    except ValueError as exc:
        raise ProviderError(f"{provider} payload was not JSON", provider=provider) from exc


def default_client() -> httpx.Client:
    return httpx.Client()


__all__ = ["post", "default_client"]
