"""Cloudinary media hosting for generated thumbnails.

Generated images are uploaded straight from memory - nothing is written to
the local file system.  Cloudinary serves every asset from a URL of the form::

    https://res.cloudinary.com/<cloud>/image/upload/v1700000000/thumbnails/abc.png

Inserting the ``fl_attachment`` flag right after ``/upload/`` makes the CDN
answer with ``Content-Disposition: attachment``, which is how download
links are produced (see :func:`to_download_url`).
"""

from __future__ import annotations

import io
import logging

import cloudinary
import cloudinary.uploader

from thumblify.core.config import ThumblifyConfig

logger = logging.getLogger(__name__)

_UPLOAD_SEGMENT = "/upload/"
_ATTACHMENT_SEGMENT = "/upload/fl_attachment/"


def to_download_url(url: str) -> str:
    """Turn a Cloudinary delivery URL into a forced-download URL.

    The ``fl_attachment`` flag is inserted right after the first ``/upload/``
    segment.  URLs that already carry the flag, or that have no ``/upload/``
    segment, are returned unchanged.

    Args:
        url: Delivery URL of an uploaded asset.

    Returns:
        URL that makes the browser save the image instead of rendering it.
    """
    if _ATTACHMENT_SEGMENT in url or _UPLOAD_SEGMENT not in url:
        return url
    return url.replace(_UPLOAD_SEGMENT, _ATTACHMENT_SEGMENT, 1)


class MediaHost:
    """Uploads image bytes to Cloudinary.

    SDK credentials are applied on the first upload so the application can
    start without them.
    """

    def __init__(self, config: ThumblifyConfig) -> None:
        self._config = config
        self._configured = False

    def _ensure_configured(self) -> None:
        if self._configured:
            return
        cloudinary.config(
            cloud_name=self._config.cloudinary_cloud_name,
            api_key=self._config.cloudinary_api_key,
            api_secret=self._config.cloudinary_api_secret,
            secure=True,
        )
        self._configured = True

    def upload(self, image_bytes: bytes) -> str:
        """Upload raw image bytes and return the HTTPS delivery URL.

        Args:
            image_bytes: Encoded image data.

        Returns:
            The ``secure_url`` reported by Cloudinary.

        Raises:
            cloudinary.exceptions.Error: If the upload is rejected.
        """
        self._ensure_configured()
        result = cloudinary.uploader.upload(
            io.BytesIO(image_bytes),
            resource_type="image",
            folder=self._config.cloudinary_folder,
        )
        secure_url = result["secure_url"]
        logger.info("Uploaded %d bytes to %s", len(image_bytes), secure_url)
        return secure_url
