"""Meshery API client.

This module provides the MesheryClient that submits combined manifests as a
Meshery design and downloads stored designs. Both operations share one
degradation policy, selected by ``Settings.offline_fallback_enabled``:

- lenient (enabled): transport failures, HTML auth redirects, unexpected
  status codes and unrecognised bodies yield an offline identifier (or the
  local manifests, for downloads) and the run carries on
- strict (disabled): the same conditions raise
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Optional

import requests

from kanvas_snapshot.core.config import Settings
from kanvas_snapshot.core.errors import (
    DesignCreationError,
    HTTPRequestError,
    KanvasSnapshotError,
    ResponseDecodingError,
)
from kanvas_snapshot.core.schema.design import DesignRequest, is_offline_identifier
from kanvas_snapshot.meshery.extraction import extract_design_id, parse_json_body
from kanvas_snapshot.meshery.offline import offline_identifier

logger = logging.getLogger(__name__)

SUCCESS_STATUS_CODES = (200, 201)


def design_view_url(api_base_url: str, identifier: str) -> str:
    """URL of the design in the Meshery UI."""
    base = api_base_url.rstrip("/")
    if base.endswith("/api"):
        base = base[: -len("/api")]
    return f"{base}/extension/meshmap?mode=design&design={identifier}"


def looks_like_html(body: str) -> bool:
    """Return True for HTML pages, which Meshery serves on auth redirects."""
    lowered = body.lower()
    return "<!doctype html" in lowered or "<html" in lowered


def _trim(text: str, max_len: int = 200) -> str:
    if len(text) <= max_len:
        return text
    return text[:max_len] + "..."


@dataclass(frozen=True)
class DesignDownload:
    """Content fetched for a design.

    Attributes:
        content: Manifest text to write out
        offline: True if ``content`` is the local manifests rather than
            Meshery's stored copy
        source_url: URL the content was fetched from ("" when offline)
    """
    content: str
    offline: bool
    source_url: str = ""


class MesheryClient:
    """Client for the Meshery design endpoints.

    Example:
        >>> client = MesheryClient(Settings(provider_token="..."))
        >>> design_id = client.submit(manifests.combined(), name="my-app")
    """

    def __init__(
        self,
        settings: Settings,
        session: Optional[requests.Session] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the client.

        Args:
            settings: Run settings (base URL, endpoints, token, policy)
            session: HTTP session to use (default: a new requests.Session)
            now: Clock used for offline identifiers (default: datetime.now)
        """
        self.settings = settings
        self.session = session if session is not None else requests.Session()
        self._now = now

    @property
    def base_url(self) -> str:
        return self.settings.api_base_url.rstrip("/")

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.settings.provider_token:
            headers["Cookie"] = f"token={self.settings.provider_token};meshery-provider=Meshery"
        return headers

    def _fetch(self, method: str, url: str, **kwargs) -> requests.Response:
        """Send a request and read its body, always releasing the connection."""
        response = self.session.request(
            method, url, headers=self._headers(), timeout=self.settings.timeout_seconds, **kwargs
        )
        try:
            # Force the body to be read while the connection is open
            _ = response.text
        finally:
            response.close()
        return response

    def _degrade(self, name: str, error: KanvasSnapshotError) -> str:
        if not self.settings.offline_fallback_enabled:
            raise DesignCreationError(error) from error
        identifier = offline_identifier(name, now=self._now)
        logger.warning(f"{error.short_description}. Working in offline mode with design id: {identifier}")
        return identifier

    def submit(
        self,
        manifest_text: str,
        name: str,
        email: Optional[str] = None,
        file_name: Optional[str] = None,
    ) -> str:
        """Create a design from manifest text.

        Args:
            manifest_text: Combined manifest content
            name: Design name
            email: Address Meshery notifies when the design is ready
            file_name: File name reported with the ``file`` payload layout

        Returns:
            The design identifier, or an offline identifier in lenient mode

        Raises:
            PayloadEncodingError: If the request body cannot be built
            DesignCreationError: In strict mode, on any submission failure
        """
        request = DesignRequest(
            name=name,
            manifest_content=manifest_text,
            file_name=file_name or f"{name}.yaml",
            email=email or None,
        )
        body = request.encode(self.settings.payload_format)

        url = f"{self.base_url}{self.settings.snapshot_endpoint}"
        logger.info(f"Sending request to: {url}")
        if self.settings.provider_token:
            logger.info("Using Meshery token for authentication")
        else:
            logger.warning("No Meshery token provided, authentication will likely fail")

        try:
            response = self._fetch("POST", url, data=body)
        except requests.RequestException as e:
            logger.error(f"HTTP request failed: {e}")
            error = HTTPRequestError(str(e))
            error.__cause__ = e
            return self._degrade(name, error)

        text = response.text
        logger.info(f"Response status: {response.status_code}")
        logger.debug(f"Response body: {text}")

        if looks_like_html(text):
            logger.warning("Received HTML response instead of JSON - authentication failed")
            return self._degrade(name, HTTPRequestError("authentication failed", status_code=response.status_code))

        if response.status_code not in SUCCESS_STATUS_CODES:
            logger.warning(f"Unexpected response code: {response.status_code}")
            return self._degrade(
                name,
                HTTPRequestError(f"unexpected response code: {response.status_code}", status_code=response.status_code),
            )

        design_id = extract_design_id(text)
        if not design_id:
            logger.warning(f"Could not extract design ID from response: {_trim(text)}")
            return self._degrade(
                name, ResponseDecodingError("could not extract design ID from response", body=_trim(text))
            )

        logger.info(f"Successfully created Meshery design. ID: {design_id}")
        return design_id

    def _download_fallback(self, error: HTTPRequestError, fallback_content: str) -> DesignDownload:
        if not self.settings.offline_fallback_enabled:
            raise error
        logger.warning(f"{error.short_description}. Writing the local manifests instead")
        return DesignDownload(content=fallback_content, offline=True)

    def download(self, identifier: str, fallback_content: str) -> DesignDownload:
        """Fetch the stored manifest content of a design.

        Args:
            identifier: Design identifier
            fallback_content: Local manifest text used in offline mode

        Returns:
            DesignDownload with the content to write

        Raises:
            HTTPRequestError: In strict mode, when the design cannot be fetched
        """
        if is_offline_identifier(identifier):
            logger.warning("Design was created in offline mode, writing the local manifests instead")
            return DesignDownload(content=fallback_content, offline=True)

        url = f"{self.base_url}{self.settings.download_endpoint.rstrip('/')}/{identifier}"
        logger.info(f"Downloading design from: {url}")

        try:
            response = self._fetch("GET", url)
        except requests.RequestException as e:
            logger.error(f"HTTP request failed: {e}")
            error = HTTPRequestError(str(e))
            error.__cause__ = e
            return self._download_fallback(error, fallback_content)

        text = response.text
        if looks_like_html(text):
            logger.warning("Received HTML response instead of the design - authentication failed")
            return self._download_fallback(
                HTTPRequestError("authentication failed", status_code=response.status_code), fallback_content
            )
        if response.status_code != 200:
            logger.warning(f"Unexpected response code: {response.status_code}")
            return self._download_fallback(
                HTTPRequestError(f"unexpected response code: {response.status_code}", status_code=response.status_code),
                fallback_content,
            )

        data = parse_json_body(text)
        if isinstance(data, dict) and isinstance(data.get("pattern_file"), str):
            text = data["pattern_file"]

        return DesignDownload(content=text, offline=False, source_url=url)
