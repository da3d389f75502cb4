from typing import Dict, Optional

import requests

from parfetch.core.errors import NetworkError
from parfetch.fetch.base import BaseFetcher, FetchRequest, FetchResult, _now_iso
from parfetch.fetch.rate_limit import RateBucket

_CHUNK_SIZE = 64 * 1024


class RequestsFetcher(BaseFetcher):
    """Rate-limited fetcher for HTML pages, backed by a requests Session."""

    def __init__(
        self,
        requests_per_second: float,
        burst: int,
        timeout: float,
        max_body_bytes: int,
        user_agent: str,
        bucket: Optional[RateBucket] = None,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(requests_per_second, burst, timeout, max_body_bytes, user_agent, bucket=bucket)
        self.session = session or requests.Session()

    def _send(self, request: FetchRequest, headers: Dict[str, str]) -> FetchResult:
        headers.setdefault("Accept-Language", "en-US,en;q=0.9")
        try:
            resp = self.session.request(
                request.method, request.url, headers=headers, timeout=self.timeout, stream=True
            )
        except requests.Timeout as e:
            return _failed(request.url, NetworkError(f"timeout while fetching {request.url}: {e}", url=request.url))
        except requests.RequestException as e:
            return _failed(request.url, NetworkError(f"failed to fetch {request.url}: {e}", url=request.url))

        try:
            return self._read_capped(
                request.url,
                int(resp.status_code),
                resp.headers.get("Content-Length"),
                resp.iter_content(chunk_size=_CHUNK_SIZE),
            )
        except requests.RequestException as e:
            err = NetworkError(f"failed reading body from {request.url}: {e}", url=request.url, status_code=int(resp.status_code))
            return FetchResult(url=request.url, status_code=int(resp.status_code), body=b"", error=err, fetched_at=_now_iso())
        finally:
            resp.close()

    def close(self) -> None:
        self.session.close()


def _failed(url: str, err: NetworkError) -> FetchResult:
    return FetchResult(url=url, status_code=0, body=b"", error=err, fetched_at=_now_iso())
