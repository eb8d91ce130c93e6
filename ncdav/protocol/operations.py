"""
WebDAV protocol operations combining request building and response parsing.

This class provides a high-level interface to the Nextcloud files endpoint
while remaining completely I/O-free.
"""

import base64
from typing import Dict, Iterable, Optional, Union
from urllib.parse import urljoin, urlparse

from ncdav.lib import error

from .status import interpret_mkcol
from .types import (
    DEPTH_INFINITY,
    DAVMethod,
    DAVRequest,
    DAVResponse,
    MkColStatus,
    MultiStatus,
    Property,
    PropFind,
    PropPatch,
    UnknownStatus,
)
from .xml_builders import (
    build_mkcol_body,
    build_propfind_body,
    build_proppatch_body,
)
from .xml_parsers import (
    parse_propfind_response,
    parse_proppatch_response,
)


class NextcloudDAVProtocol:
    """
    Sans-I/O WebDAV protocol handler.

    Builds requests and parses responses without doing any I/O.
    All HTTP communication is delegated to an external I/O implementation.

    Example:
        protocol = NextcloudDAVProtocol(
            base_url="https://cloud.example.com/remote.php/dav/files/alice/"
        )

        # Build request
        request = protocol.propfind_request(
            "Documents/", PropFind([dav.GetLastModified, cloud.Size], depth=1)
        )

        # Execute with your I/O (not shown)
        response = io.execute(request)

        # Parse response
        multistatus = protocol.parse_propfind_response(response)
    """

    def __init__(
        self,
        base_url: str = "",
        username: Optional[str] = None,
        password: Optional[str] = None,
        namespaces: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize the protocol handler.

        Args:
            base_url: Base URL of the WebDAV tree
            username: Username for Basic authentication
            password: Password (or app password) for Basic authentication
            namespaces: Extra prefix -> URI mappings for request bodies
        """
        self.base_url = base_url.rstrip("/") if base_url else ""
        self.username = username
        self.password = password
        self.namespaces = namespaces
        self._auth_header = self._build_auth_header(username, password)

    def _build_auth_header(
        self,
        username: Optional[str],
        password: Optional[str],
    ) -> Optional[str]:
        """Build Basic auth header if credentials provided."""
        if username and password:
            credentials = f"{username}:{password}"
            encoded = base64.b64encode(credentials.encode()).decode()
            return f"Basic {encoded}"
        return None

    def _base_headers(self) -> Dict[str, str]:
        """Return base headers for all requests."""
        headers = {
            "Content-Type": "application/xml; charset=utf-8",
        }
        if self._auth_header:
            headers["Authorization"] = self._auth_header
        return headers

    def _resolve_url(self, path: str) -> str:
        """
        Resolve a path to a full URL.

        Args:
            path: Relative path or absolute URL

        Returns:
            Full URL
        """
        if not path:
            return self.base_url or ""

        # Already a full URL
        parsed = urlparse(path)
        if parsed.scheme:
            return path

        # Relative path - join with base
        if self.base_url:
            # Ensure base_url ends with / for proper joining
            base = self.base_url
            if not base.endswith("/"):
                base += "/"
            return urljoin(base, path.lstrip("/"))

        return path

    # =========================================================================
    # Request builders
    # =========================================================================

    def propfind_request(self, path: str, propfind: PropFind) -> DAVRequest:
        """
        Build a PROPFIND request.

        Args:
            path: Resource path or URL
            propfind: Properties to retrieve and the Depth to ask for

        Returns:
            DAVRequest ready for execution
        """
        depth = "infinity" if propfind.depth == DEPTH_INFINITY else str(propfind.depth)
        headers = {
            **self._base_headers(),
            "Depth": depth,
        }
        return DAVRequest(
            method=DAVMethod.PROPFIND,
            url=self._resolve_url(path),
            headers=headers,
            body=build_propfind_body(propfind, self.namespaces),
        )

    def proppatch_request(self, path: str, proppatch: PropPatch) -> DAVRequest:
        """
        Build a PROPPATCH request.

        Args:
            path: Resource path or URL
            proppatch: Properties to set and remove

        Returns:
            DAVRequest ready for execution
        """
        return DAVRequest(
            method=DAVMethod.PROPPATCH,
            url=self._resolve_url(path),
            headers=self._base_headers(),
            body=build_proppatch_body(proppatch, self.namespaces),
        )

    def mkcol_request(
        self, path: str, props: Optional[Iterable[Property]] = None
    ) -> DAVRequest:
        """
        Build a MKCOL request.  With ``props`` an extended MKCOL body is
        sent, otherwise the request has no body.
        """
        body = build_mkcol_body(props, self.namespaces)
        headers = self._base_headers() if body else {
            k: v for k, v in self._base_headers().items() if k != "Content-Type"
        }
        return DAVRequest(
            method=DAVMethod.MKCOL,
            url=self._resolve_url(path),
            headers=headers,
            body=body,
        )

    # =========================================================================
    # Response parsers
    # =========================================================================

    def parse_propfind_response(self, response: DAVResponse) -> MultiStatus:
        """
        Parse a PROPFIND response.

        Returns an empty MultiStatus for 404.

        Raises:
            PropfindError: Any other non-2xx status
            DecodeError: The body is not a multistatus document
        """
        return parse_propfind_response(response.body, response.status)

    def parse_proppatch_response(self, response: DAVResponse) -> MultiStatus:
        """
        Parse a PROPPATCH response.  Use status.interpret_proppatch on the
        propstats' status_line to get PROPPATCH specific outcomes.
        """
        return parse_proppatch_response(response.body, response.status)

    def parse_mkcol_response(
        self, response: DAVResponse
    ) -> Union[MkColStatus, UnknownStatus]:
        """
        Map the MKCOL response status.

        Raises:
            AuthorizationError: 401, the credentials were not accepted
        """
        if response.status == 401:
            raise error.AuthorizationError(reason=error.errmsg(response))
        return interpret_mkcol(response.status)
