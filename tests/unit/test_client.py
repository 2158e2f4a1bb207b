"""Unit tests for the API client and its bounded poller.

Requests are answered by ``httpx.MockTransport``; sleeping is recorded
instead of performed.
"""

import json

import httpx
import pytest

from thumblify.client import (
    GenerationFailedError,
    GenerationTimeout,
    PollPolicy,
    ThumblifyClient,
)

IMAGE_URL = "https://res.cloudinary.com/demo/image/upload/v1/thumbnails/a.png"


def _record(**overrides) -> dict:
    record = {
        "_id": "abc",
        "title": "10 sleep tips",
        "isGenerating": True,
        "status": "generating",
        "image_url": None,
        "error": None,
    }
    record.update(overrides)
    return record


def _client(handler, sleeps: list) -> ThumblifyClient:
    return ThumblifyClient(
        "http://testserver",
        transport=httpx.MockTransport(handler),
        sleep=sleeps.append,
    )


class TestPollPolicy:
    """Tests for the delay schedule."""

    def test_delays_grow_and_cap(self):
        policy = PollPolicy(interval=2.0, backoff=2.0, max_interval=5.0, max_attempts=5)
        assert list(policy.delays()) == [2.0, 4.0, 5.0, 5.0]

    def test_fixed_interval(self):
        policy = PollPolicy(interval=2.0, backoff=1.0, max_attempts=3)
        assert list(policy.delays()) == [2.0, 2.0]

    def test_first_delay_is_capped(self):
        policy = PollPolicy(interval=30.0, backoff=1.5, max_interval=10.0, max_attempts=3)
        assert list(policy.delays()) == [10.0, 10.0]

    def test_single_attempt_has_no_delay(self):
        assert list(PollPolicy(max_attempts=1).delays()) == []


class TestPollThumbnail:
    """Tests for ThumblifyClient.poll_thumbnail."""

    def test_stops_once_image_present(self):
        responses = [_record(), _record(), _record(isGenerating=False, image_url=IMAGE_URL)]
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"thumbnail": responses[len(requests) - 1]})

        sleeps: list = []
        with _client(handler, sleeps) as client:
            result = client.poll_thumbnail("abc", PollPolicy(interval=2.0, backoff=1.5))

        assert result["image_url"] == IMAGE_URL
        assert len(requests) == 3
        assert all(r.url.path == "/api/user/thumbnail/abc" for r in requests)
        assert sleeps == [2.0, 3.0]

    def test_already_complete_needs_no_wait(self):
        def handler(request):
            return httpx.Response(200, json={"thumbnail": _record(image_url=IMAGE_URL)})

        sleeps: list = []
        with _client(handler, sleeps) as client:
            client.poll_thumbnail("abc")

        assert sleeps == []

    def test_times_out_after_max_attempts(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"thumbnail": _record()})

        sleeps: list = []
        with _client(handler, sleeps) as client:
            with pytest.raises(GenerationTimeout) as exc_info:
                client.poll_thumbnail("abc", PollPolicy(max_attempts=4))

        assert exc_info.value.attempts == 4
        assert len(calls) == 4
        assert len(sleeps) == 3

    def test_failed_record_stops_polling(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(
                200,
                json={"thumbnail": _record(isGenerating=False, status="failed", error="boom")},
            )

        sleeps: list = []
        with _client(handler, sleeps) as client:
            with pytest.raises(GenerationFailedError, match="boom"):
                client.poll_thumbnail("abc")

        assert len(calls) == 1
        assert sleeps == []

    def test_http_error_propagates(self):
        def handler(request):
            return httpx.Response(404, json={"detail": "Thumbnail not found"})

        sleeps: list = []
        with _client(handler, sleeps) as client:
            with pytest.raises(httpx.HTTPStatusError):
                client.poll_thumbnail("abc")


class TestClientRequests:
    """Tests for the remaining client calls."""

    def test_generate_payload(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"success": True, "thumbnail": _record()})

        with _client(handler, []) as client:
            record = client.generate(title="10 sleep tips", style="Minimalist", color_scheme="pastel")

        assert record["_id"] == "abc"
        body = json.loads(seen[0].content)
        assert body["title"] == "10 sleep tips"
        assert body["aspect_ratio"] == "16:9"
        assert body["color_scheme"] == "pastel"
        assert seen[0].url.path == "/api/thumbnail/generate"

    def test_blank_title_rejected_without_request(self):
        def handler(request):
            raise AssertionError("no request expected")

        with _client(handler, []) as client:
            with pytest.raises(ValueError, match="Title is required"):
                client.generate(title="  ", style="Minimalist")

    def test_delete_and_list(self):
        def handler(request):
            if request.method == "DELETE":
                return httpx.Response(200, json={"message": "Thumbnail deleted successfully"})
            return httpx.Response(200, json={"thumbnails": [_record()]})

        with _client(handler, []) as client:
            assert client.delete_thumbnail("abc") == "Thumbnail deleted successfully"
            assert len(client.list_thumbnails()) == 1

    def test_download_url(self):
        assert ThumblifyClient.download_url(_record(image_url=IMAGE_URL)) == IMAGE_URL.replace(
            "/upload/", "/upload/fl_attachment/"
        )
        assert ThumblifyClient.download_url(_record()) is None
