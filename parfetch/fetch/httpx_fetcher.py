from typing import Dict, Optional

import httpx

from parfetch.core.errors import NetworkError
from parfetch.fetch.base import BaseFetcher, FetchRequest, FetchResult, _now_iso
from parfetch.fetch.rate_limit import RateBucket


class HttpxFetcher(BaseFetcher):
    """Rate-limited fetcher for JSON APIs, backed by an httpx Client."""

    def __init__(
        self,
        requests_per_second: float,
        burst: int,
        timeout: float,
        max_body_bytes: int,
        user_agent: str,
        bucket: Optional[RateBucket] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        super().__init__(requests_per_second, burst, timeout, max_body_bytes, user_agent, bucket=bucket)
        self.client = httpx.Client(
            timeout=timeout,
            headers={"Accept": "application/json"},
            follow_redirects=True,
            transport=transport,
        )

    def _send(self, request: FetchRequest, headers: Dict[str, str]) -> FetchResult:
        try:
            with self.client.stream(request.method, request.url, headers=headers) as resp:
                return self._read_capped(
                    request.url,
                    int(resp.status_code),
                    resp.headers.get("Content-Length"),
                    resp.iter_bytes(),
                )
        except httpx.TimeoutException as e:
            err = NetworkError(f"timeout while fetching {request.url}: {e}", url=request.url)
        except httpx.HTTPError as e:
            err = NetworkError(f"failed to fetch {request.url}: {e}", url=request.url)
        return FetchResult(url=request.url, status_code=0, body=b"", error=err, fetched_at=_now_iso())

    def close(self) -> None:
        self.client.close()
