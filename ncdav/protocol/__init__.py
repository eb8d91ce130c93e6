"""
Sans-I/O WebDAV protocol implementation.

This module provides protocol-level operations without any I/O.
It builds requests and parses responses as pure data transformations.

The protocol layer is organized into:
- tags: Tag identities, the (prefix, local name) pairs elements are compared by
- types: Core data structures (DAVRequest, DAVResponse, the multistatus tree)
- status: Status line interpretation
- xml_builders: Pure functions to build XML request bodies
- xml_parsers: Pure functions to parse XML response bodies
- operations: NextcloudDAVProtocol class combining builders and parsers

Example usage:

    from ncdav.elements import cloud, dav
    from ncdav.protocol import PropFind, decode, encode_propfind

    body = encode_propfind(PropFind([dav.GetEtag, cloud.Size], depth=1))

    # Send it with your preferred I/O, then
    multistatus = decode(response_body)
    for response in multistatus.responses:
        print(response.href, response.find(cloud.Size).text)
"""

from .tags import TagIdentity, resolve
from .types import (
    # Enums
    DAVMethod,
    MkColStatus,
    PropPatchStatus,
    PropStatStatus,
    UnknownStatus,
    # Request/Response
    DAVRequest,
    DAVResponse,
    # Property values
    Children,
    Empty,
    Property,
    Text,
    # Result types
    DecodeWarning,
    MultiStatus,
    PropStat,
    Response,
    # Request descriptors
    DEPTH_INFINITY,
    PropFind,
    PropPatch,
)
from .status import interpret, interpret_mkcol, interpret_proppatch
from .xml_builders import (
    build_mkcol_body,
    build_propfind_body,
    build_proppatch_body,
    encode_propfind,
    encode_proppatch,
)
from .xml_parsers import (
    decode,
    parse_multistatus,
    parse_propfind_response,
    parse_proppatch_response,
)
from .operations import NextcloudDAVProtocol

__all__ = [
    # Tags
    "TagIdentity",
    "resolve",
    # Enums
    "DAVMethod",
    "MkColStatus",
    "PropPatchStatus",
    "PropStatStatus",
    "UnknownStatus",
    # Request/Response
    "DAVRequest",
    "DAVResponse",
    # Property values
    "Children",
    "Empty",
    "Property",
    "Text",
    # Result types
    "DecodeWarning",
    "MultiStatus",
    "PropStat",
    "Response",
    # Request descriptors
    "DEPTH_INFINITY",
    "PropFind",
    "PropPatch",
    # Status lines
    "interpret",
    "interpret_mkcol",
    "interpret_proppatch",
    # XML Builders
    "build_mkcol_body",
    "build_propfind_body",
    "build_proppatch_body",
    "encode_propfind",
    "encode_proppatch",
    # XML Parsers
    "decode",
    "parse_multistatus",
    "parse_propfind_response",
    "parse_proppatch_response",
    # Protocol
    "NextcloudDAVProtocol",
]
