"""HTTP client implementation using httpx."""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from .base import HttpResponse

DEFAULT_USER_AGENT = "openrfps/1.0 (+https://github.com/openrfps/openrfps)"


class HttpxClient:
    """HTTP client implementation using httpx."""

    def __init__(
        self,
        timeout: float = 30.0,
        follow_redirects: bool = True,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self.timeout = timeout
        self.follow_redirects = follow_redirects
        self.headers = {"User-Agent": user_agent}

    def get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> HttpResponse:
        """Perform a GET request."""
        merged_headers = {**self.headers, **(headers or {})}

        with httpx.Client(timeout=timeout or self.timeout, follow_redirects=self.follow_redirects) as client:
            response = client.get(url, params=params, headers=merged_headers)

            return HttpResponse(
                status_code=response.status_code,
                text=response.text,
                url=str(response.url),
                headers=dict(response.headers),
            )
