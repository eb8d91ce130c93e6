"""
Core protocol types for the Sans-I/O WebDAV implementation.

These dataclasses represent HTTP requests and responses at the protocol
level, and the decoded multistatus tree, independent of any I/O
implementation.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Union
from urllib.parse import unquote, urlparse

from .tags import TagIdentity

DEPTH_INFINITY = -1


class DAVMethod(Enum):
    """WebDAV HTTP methods."""

    PROPFIND = "PROPFIND"
    PROPPATCH = "PROPPATCH"
    MKCOL = "MKCOL"


@dataclass(frozen=True)
class DAVRequest:
    """
    Represents an HTTP request to be made.

    This is a pure data structure with no I/O. It describes what request
    should be made, but does not make it.

    Attributes:
        method: HTTP method (PROPFIND, PROPPATCH, MKCOL)
        url: Full URL for the request
        headers: HTTP headers as dict
        body: Request body as bytes (optional)
    """

    method: DAVMethod
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None

    def with_header(self, name: str, value: str) -> "DAVRequest":
        """Return new request with additional header."""
        new_headers = {**self.headers, name: value}
        return DAVRequest(
            method=self.method,
            url=self.url,
            headers=new_headers,
            body=self.body,
        )


@dataclass(frozen=True)
class DAVResponse:
    """
    Represents an HTTP response received.

    Attributes:
        status: HTTP status code
        headers: HTTP headers as dict
        body: Response body as bytes
    """

    status: int
    headers: dict[str, str]
    body: bytes

    @property
    def ok(self) -> bool:
        """True if status indicates success (2xx)."""
        return 200 <= self.status < 300

    @property
    def is_multistatus(self) -> bool:
        """True if this is a 207 Multi-Status response."""
        return self.status == 207

    @property
    def reason(self) -> str:
        """Return a reason phrase for the status code."""
        reasons = {
            200: "OK",
            201: "Created",
            207: "Multi-Status",
            401: "Unauthorized",
            403: "Forbidden",
            404: "Not Found",
            405: "Method Not Allowed",
            409: "Conflict",
            415: "Unsupported Media Type",
            424: "Failed Dependency",
            500: "Internal Server Error",
            507: "Insufficient Storage",
        }
        return reasons.get(self.status, "Unknown")


# Statuses


class UnknownStatus(Enum):
    """
    A status line that is none of the explicitly mapped ones, classified
    by its status code class.
    """

    UNKNOWN_SUCCESS = "unknown-success"
    UNKNOWN_CLIENT_ERROR = "unknown-client-error"
    UNKNOWN_SERVER_ERROR = "unknown-server-error"


class PropStatStatus(Enum):
    OK = 200
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404


class PropPatchStatus(Enum):
    OK = 200
    FORBIDDEN = 403
    ## 403 together with a cannot-modify-protected-property precondition
    FORBIDDEN_PROTECTED_PROPERTY = "403-protected"
    CONFLICT = 409
    FAILED_DEPENDENCY = 424
    INSUFFICIENT_STORAGE = 507


class MkColStatus(Enum):
    CREATED = 201
    FORBIDDEN = 403
    METHOD_NOT_ALLOWED = 405
    CONFLICT = 409
    UNSUPPORTED_MEDIA_TYPE = 415
    INSUFFICIENT_STORAGE = 507


PropStatus = Union[PropStatStatus, UnknownStatus]


# Property values


@dataclass(frozen=True)
class Empty:
    """A property with neither text nor child elements, e.g. ``<oc:tags/>``."""


@dataclass
class Text:
    text: str


@dataclass
class Children:
    props: list["Property"] = field(default_factory=list)


PropertyValue = Union[Empty, Text, Children]


@dataclass
class Property:
    """
    A decoded (or to be encoded) property.  The value is either Empty,
    Text or an ordered list of child properties, which may in turn hold
    further children.
    """

    tag: TagIdentity
    value: PropertyValue = field(default_factory=Empty)

    @property
    def text(self) -> str | None:
        if isinstance(self.value, Text):
            return self.value.text
        return None

    @property
    def children(self) -> list["Property"]:
        if isinstance(self.value, Children):
            return self.value.props
        return []

    def __iter__(self) -> Iterator["Property"]:
        return iter(self.children)

    def find(self, tag: TagIdentity) -> "Property | None":
        """First direct child with the given tag, or None."""
        for child in self.children:
            if child.tag == tag:
                return child
        return None

    def findall(self, tag: TagIdentity) -> list["Property"]:
        """All direct children with the given tag, in document order."""
        return [child for child in self.children if child.tag == tag]


# Decoded multistatus tree


@dataclass
class PropStat:
    """
    One d:propstat block: properties sharing one status.

    Attributes:
        status: Interpreted status line (OK when the block had none)
        properties: The children of d:prop, in document order
        status_line: The raw d:status text, if any
        error: The d:error element, if any
        description: The d:responsedescription text, if any
    """

    status: PropStatus = PropStatStatus.OK
    properties: list[Property] = field(default_factory=list)
    status_line: str | None = None
    error: Property | None = None
    description: str | None = None

    def find(self, tag: TagIdentity) -> Property | None:
        for prop in self.properties:
            if prop.tag == tag:
                return prop
        return None


@dataclass
class Response:
    """
    One d:response element.

    ``href`` is the empty string when the element had none; callers should
    treat such a response as incomplete.  ``status`` is only set for the
    ``href + status`` form of a response (e.g. deleted resources).
    """

    href: str = ""
    prop_stats: list[PropStat] = field(default_factory=list)
    description: str | None = None
    status: PropStatus | None = None
    error: Property | None = None

    @property
    def path(self) -> str:
        """
        The href with percent-encoding removed and any scheme/host part
        stripped.
        """
        # Fix for double-encoded URLs
        text = self.href.replace("%2540", "%40")
        if "://" in text:
            text = urlparse(text).path
        return unquote(text)

    def properties(self, status: PropStatus = PropStatStatus.OK) -> list[Property]:
        """All properties from the propstats carrying ``status``."""
        ret: list[Property] = []
        for prop_stat in self.prop_stats:
            if prop_stat.status == status:
                ret.extend(prop_stat.properties)
        return ret

    def find(self, tag: TagIdentity) -> Property | None:
        """The property with ``tag`` from an OK propstat, or None."""
        for prop in self.properties():
            if prop.tag == tag:
                return prop
        return None


@dataclass(frozen=True)
class DecodeWarning:
    """
    Something was decoded with reduced fidelity: ``tag`` is the element
    whose text was affected, ``reason`` says what happened.
    """

    tag: TagIdentity
    reason: str


@dataclass
class MultiStatus:
    """
    A decoded 207 Multi-Status body.

    Attributes:
        responses: One Response per d:response, in document order
        description: Top-level d:responsedescription, if any
        sync_token: d:sync-token, if any
        warnings: Partial-fidelity decoding notes (see DecodeWarning)
    """

    responses: list[Response] = field(default_factory=list)
    description: str | None = None
    sync_token: str | None = None
    warnings: list[DecodeWarning] = field(default_factory=list)


# Request descriptors


@dataclass
class PropFind:
    """
    Properties to request with PROPFIND.  ``depth`` goes into the Depth
    header: 0, 1 or DEPTH_INFINITY.
    """

    props: list[TagIdentity] = field(default_factory=list)
    depth: int = 1


@dataclass
class PropPatch:
    set_props: list[Property] = field(default_factory=list)
    remove_props: list[TagIdentity] = field(default_factory=list)
