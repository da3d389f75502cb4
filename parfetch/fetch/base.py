import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

from parfetch.core.errors import BadStatus, FetchError, RateLimited, ResponseTooLarge
from parfetch.fetch.rate_limit import RateBucket

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchRequest:
    url: str
    method: str = "GET"
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class FetchResult:
    url: str
    status_code: int
    body: bytes
    error: Optional[FetchError]
    fetched_at: str  # ISO 8601

    @property
    def ok(self) -> bool:
        return self.error is None and 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class BaseFetcher:
    """
    Polite single-caller HTTP client.

    Every request first takes a token from the fetcher's own RateBucket, so
    one instance never exceeds `burst` back-to-back requests or `rate`
    sustained requests per second. Subclasses only implement `_send`.
    Status codes and errors are returned in the FetchResult, never raised.
    """

    def __init__(
        self,
        requests_per_second: float,
        burst: int,
        timeout: float,
        max_body_bytes: int,
        user_agent: str,
        bucket: Optional[RateBucket] = None,
    ):
        self.timeout = timeout
        self.max_body_bytes = max_body_bytes
        self.user_agent = user_agent
        self.bucket = bucket or RateBucket(rate=requests_per_second, capacity=burst)

    def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> FetchResult:
        return self.fetch(FetchRequest(url=url, headers=dict(headers or {})))

    def fetch(self, request: FetchRequest) -> FetchResult:
        self.bucket.acquire()
        headers = dict(request.headers)
        # the User-Agent is fixed per fetcher; request headers cannot replace it
        headers["User-Agent"] = self.user_agent
        logger.debug("%s %s", request.method, request.url)
        return self._send(request, headers)

    def _send(self, request: FetchRequest, headers: Dict[str, str]) -> FetchResult:
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _read_capped(self, url: str, status: int, declared_length: Optional[str], chunks: Iterable[bytes]) -> FetchResult:
        """Collect body chunks, rejecting the body once it would pass max_body_bytes."""
        if declared_length and declared_length.isdigit() and int(declared_length) > self.max_body_bytes:
            return self._too_large(url, status, int(declared_length))

        buf = bytearray()
        for chunk in chunks:
            if not chunk:
                continue
            if len(buf) + len(chunk) > self.max_body_bytes:
                return self._too_large(url, status, len(buf) + len(chunk))
            buf.extend(chunk)
        return FetchResult(url=url, status_code=status, body=bytes(buf), error=None, fetched_at=_now_iso())

    def _too_large(self, url: str, status: int, seen: int) -> FetchResult:
        err = ResponseTooLarge(
            f"response body from {url} exceeds {self.max_body_bytes} bytes (saw at least {seen})",
            url=url,
            status_code=status,
        )
        return FetchResult(url=url, status_code=status, body=b"", error=err, fetched_at=_now_iso())


def check_response(result: FetchResult) -> FetchResult:
    """Raise the error a caller should see for this result, or return it unchanged when usable."""
    if result.error is not None:
        raise result.error
    if result.ok:
        return result
    if result.status_code == 429:
        raise RateLimited(
            f"rate limited or blocked ({result.status_code}) at {result.url}; slow rps/burst and retry later",
            url=result.url,
            status_code=result.status_code,
        )
    snippet = result.text[:200]
    raise BadStatus(
        f"bad status {result.status_code} for {result.url}: {snippet}",
        url=result.url,
        status_code=result.status_code,
    )


def _now_iso() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")
