"""HTTP client for the Thumblify API, with a bounded generation poller.

:class:`ThumblifyClient` wraps ``httpx.Client`` and keeps the session cookie
set by ``/api/auth/login`` for all later requests.

Polling
-------
:meth:`ThumblifyClient.poll_thumbnail` fetches a record until it has an
image, following a :class:`PollPolicy`:

- requests are issued one after another, never overlapping, so the last
  response seen is always the answer to the most recent request
- the wait between requests starts at ``interval`` and grows by ``backoff``
  up to ``max_interval``
- a record reported as ``failed`` ends polling with
  :class:`GenerationFailedError`
- after ``max_attempts`` fetches without an image, polling ends with
  :class:`GenerationTimeout`

Usage
-----
::

    with ThumblifyClient("http://localhost:3000") as client:
        client.login("me@example.com", "secret")
        record = client.generate(title="10 sleep tips", style="Minimalist")
        record = client.poll_thumbnail(record["_id"])
        print(client.download_url(record))
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

import httpx

from thumblify.core.media_host import to_download_url

logger = logging.getLogger(__name__)


class GenerationTimeout(Exception):
    """Raised when a record is still generating after the last poll."""

    def __init__(self, thumbnail_id: str, attempts: int):
        super().__init__(f"Thumbnail {thumbnail_id} not ready after {attempts} attempts")
        self.thumbnail_id = thumbnail_id
        self.attempts = attempts


class GenerationFailedError(Exception):
    """Raised when the server reports a record as failed."""

    def __init__(self, thumbnail_id: str, message: str | None):
        super().__init__(message or f"Thumbnail {thumbnail_id} failed")
        self.thumbnail_id = thumbnail_id


@dataclass
class PollPolicy:
    """Timing for :meth:`ThumblifyClient.poll_thumbnail`."""

    interval: float = 2.0
    backoff: float = 1.5
    max_interval: float = 10.0
    max_attempts: int = 60

    def delays(self):
        """Yield the wait before each attempt after the first."""
        delay = min(self.interval, self.max_interval)
        for _ in range(self.max_attempts - 1):
            yield delay
            delay = min(delay * self.backoff, self.max_interval)


class ThumblifyClient:
    """Synchronous client for the Thumblify REST API."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 120.0,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._http = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)
        self._sleep = sleep

    def __enter__(self) -> ThumblifyClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def _request(self, method: str, url: str, **kwargs) -> dict:
        response = self._http.request(method, url, **kwargs)
        response.raise_for_status()
        return response.json()

    # -- auth ---------------------------------------------------------------

    def register(self, name: str, email: str, password: str) -> dict:
        data = self._request(
            "POST",
            "/api/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        return data["user"]

    def login(self, email: str, password: str) -> dict:
        data = self._request(
            "POST", "/api/auth/login", json={"email": email, "password": password}
        )
        return data["user"]

    def logout(self) -> None:
        self._request("POST", "/api/auth/logout")

    # -- thumbnails ---------------------------------------------------------

    def generate(
        self,
        *,
        title: str,
        style: str,
        aspect_ratio: str = "16:9",
        color_scheme: str | None = None,
        prompt: str | None = None,
        text_overlay: bool = False,
    ) -> dict:
        """Request a thumbnail and return the created record.

        Raises:
            ValueError: If ``title`` is blank (checked before any request).
            httpx.HTTPStatusError: For any non-2xx response.
        """
        if not title.strip():
            raise ValueError("Title is required")

        payload = {
            "title": title,
            "prompt": prompt,
            "style": style,
            "aspect_ratio": aspect_ratio,
            "color_scheme": color_scheme,
            "text_overlay": text_overlay,
        }
        return self._request("POST", "/api/thumbnail/generate", json=payload)["thumbnail"]

    def get_thumbnail(self, thumbnail_id: str) -> dict:
        return self._request("GET", f"/api/user/thumbnail/{thumbnail_id}")["thumbnail"]

    def list_thumbnails(self) -> list[dict]:
        return self._request("GET", "/api/user/thumbnails")["thumbnails"]

    def delete_thumbnail(self, thumbnail_id: str) -> str:
        return self._request("DELETE", f"/api/thumbnail/delete/{thumbnail_id}")["message"]

    @staticmethod
    def download_url(thumbnail: dict) -> str | None:
        """Forced-download URL for a completed record, else None."""
        image_url = thumbnail.get("image_url")
        return to_download_url(image_url) if image_url else None

    def poll_thumbnail(self, thumbnail_id: str, policy: PollPolicy | None = None) -> dict:
        """Fetch a record until it has an image.

        Args:
            thumbnail_id: Record identifier returned by :meth:`generate`.
            policy: Poll timing; defaults to :class:`PollPolicy`.

        Returns:
            The completed record.

        Raises:
            GenerationFailedError: If the record reaches the failed state.
            GenerationTimeout: If attempts run out first.
        """
        policy = policy or PollPolicy()
        delays = policy.delays()
        attempts = 0

        while True:
            thumbnail = self.get_thumbnail(thumbnail_id)
            attempts += 1

            if thumbnail.get("image_url"):
                return thumbnail
            if thumbnail.get("status") == "failed":
                raise GenerationFailedError(thumbnail_id, thumbnail.get("error"))

            delay = next(delays, None)
            if delay is None:
                raise GenerationTimeout(thumbnail_id, attempts)

            logger.debug("Thumbnail %s still generating; retrying in %.1fs", thumbnail_id, delay)
            self._sleep(delay)
