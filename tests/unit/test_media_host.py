"""Unit tests for Cloudinary uploads and download URLs."""

import cloudinary.exceptions
import cloudinary.uploader
import pytest

from thumblify.core.media_host import MediaHost, to_download_url

URL = "https://res.cloudinary.com/demo/image/upload/v1700000000/thumbnails/abc.png"


class TestToDownloadUrl:
    """Tests for the fl_attachment transformation."""

    def test_inserts_flag_after_upload(self):
        assert to_download_url(URL) == (
            "https://res.cloudinary.com/demo/image/upload/fl_attachment/"
            "v1700000000/thumbnails/abc.png"
        )

    def test_flag_appears_exactly_once(self):
        result = to_download_url(URL)
        assert result.count("/upload/fl_attachment/") == 1

    def test_other_segments_unchanged(self):
        result = to_download_url(URL)
        assert result.replace("fl_attachment/", "", 1) == URL

    def test_already_flagged_url_unchanged(self):
        flagged = to_download_url(URL)
        assert to_download_url(flagged) == flagged

    def test_only_first_upload_segment(self):
        url = "https://res.cloudinary.com/demo/image/upload/v1/upload/abc.png"
        assert to_download_url(url) == (
            "https://res.cloudinary.com/demo/image/upload/fl_attachment/v1/upload/abc.png"
        )

    def test_url_without_upload_segment(self):
        url = "https://example.com/images/abc.png"
        assert to_download_url(url) == url


class TestMediaHost:
    """Tests for MediaHost.upload."""

    def test_upload_returns_secure_url(self, test_config, monkeypatch):
        calls = []

        def fake_upload(file, **options):
            calls.append((file.read(), options))
            return {"secure_url": URL, "url": URL.replace("https", "http")}

        monkeypatch.setattr(cloudinary.uploader, "upload", fake_upload)

        result = MediaHost(test_config).upload(b"png-bytes")

        assert result == URL
        assert calls == [(b"png-bytes", {"resource_type": "image", "folder": "thumbnails"})]

    def test_upload_errors_propagate(self, test_config, monkeypatch):
        def failing_upload(file, **options):
            raise cloudinary.exceptions.Error("Invalid API key")

        monkeypatch.setattr(cloudinary.uploader, "upload", failing_upload)

        with pytest.raises(cloudinary.exceptions.Error, match="Invalid API key"):
            MediaHost(test_config).upload(b"png-bytes")
