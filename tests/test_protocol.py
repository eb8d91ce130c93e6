"""
Unit tests for Sans-I/O protocol layer.

These tests verify protocol logic without any HTTP mocking required.
All tests are pure - they test data transformations only.
"""

import pytest
from lxml import etree

from ncdav.elements import cloud, dav
from ncdav.lib import error
from ncdav.lib.namespace import nsmap
from ncdav.protocol import (
    # Types
    DAVMethod,
    DAVRequest,
    DAVResponse,
    DEPTH_INFINITY,
    Children,
    Empty,
    MkColStatus,
    MultiStatus,
    Property,
    PropFind,
    PropPatch,
    PropStatStatus,
    TagIdentity,
    Text,
    UnknownStatus,
    # Builders
    build_mkcol_body,
    build_propfind_body,
    build_proppatch_body,
    encode_propfind,
    encode_proppatch,
    # Parsers
    decode,
    parse_propfind_response,
    parse_proppatch_response,
    # Protocol
    NextcloudDAVProtocol,
)

SIMPLE = (
    "<d:multistatus><d:response><d:href>/f</d:href><d:propstat><d:prop>"
    "<oc:size>42</oc:size></d:prop><d:status>HTTP/1.1 200 OK</d:status>"
    "</d:propstat></d:response></d:multistatus>"
)

NEXTCLOUD_LISTING = b"""<?xml version="1.0"?>
<d:multistatus xmlns:d="DAV:" xmlns:s="http://sabredav.org/ns"
    xmlns:oc="http://owncloud.org/ns" xmlns:nc="http://nextcloud.org/ns">
  <d:response>
    <d:href>/remote.php/dav/files/alice/Documents/</d:href>
    <d:propstat>
      <d:prop>
        <d:getlastmodified>Mon, 19 Oct 2026 08:10:00 GMT</d:getlastmodified>
        <d:resourcetype><d:collection/></d:resourcetype>
        <oc:size>1024</oc:size>
        <nc:share-types>
          <oc:share-type>0</oc:share-type>
          <oc:share-type>3</oc:share-type>
        </nc:share-types>
      </d:prop>
      <d:status>HTTP/1.1 200 OK</d:status>
    </d:propstat>
    <d:propstat>
      <d:prop>
        <d:getcontenttype/>
      </d:prop>
      <d:status>HTTP/1.1 404 Not Found</d:status>
    </d:propstat>
  </d:response>
  <d:response>
    <d:href>/remote.php/dav/files/alice/Documents/My%20Notes.md</d:href>
    <d:propstat>
      <d:prop>
        <d:getlastmodified>Sun, 18 Oct 2026 17:42:13 GMT</d:getlastmodified>
        <d:resourcetype/>
        <oc:size>17</oc:size>
        <nc:share-types/>
      </d:prop>
      <d:status>HTTP/1.1 200 OK</d:status>
    </d:propstat>
  </d:response>
</d:multistatus>"""


class TestDAVTypes:
    """Test core DAV types."""

    def test_dav_request_immutable(self):
        """DAVRequest should be immutable (frozen dataclass)."""
        request = DAVRequest(
            method=DAVMethod.PROPFIND,
            url="https://example.com/",
            headers={},
        )
        with pytest.raises(AttributeError):
            request.url = "https://other.com/"

    def test_dav_request_with_header(self):
        """with_header should return new request with added header."""
        request = DAVRequest(
            method=DAVMethod.PROPFIND,
            url="https://example.com/",
            headers={"Depth": "1"},
        )
        new_request = request.with_header("Authorization", "Bearer token")

        # Original unchanged
        assert "Authorization" not in request.headers
        # New has both headers
        assert new_request.headers["Depth"] == "1"
        assert new_request.headers["Authorization"] == "Bearer token"

    def test_dav_response_ok(self):
        """ok property should return True for 2xx status codes."""
        assert DAVResponse(status=200, headers={}, body=b"").ok
        assert DAVResponse(status=207, headers={}, body=b"").ok
        assert not DAVResponse(status=404, headers={}, body=b"").ok
        assert not DAVResponse(status=507, headers={}, body=b"").ok

    def test_dav_response_is_multistatus(self):
        """is_multistatus should return True only for 207."""
        assert DAVResponse(status=207, headers={}, body=b"").is_multistatus
        assert not DAVResponse(status=200, headers={}, body=b"").is_multistatus

    def test_property_helpers(self):
        """find/findall/text/children work on decoded trees."""
        share_type = cloud.ShareType
        prop = Property(
            cloud.ShareTypes,
            Children([Property(share_type, Text("0")), Property(share_type, Text("3"))]),
        )
        assert prop.text is None
        assert [p.text for p in prop.findall(share_type)] == ["0", "3"]
        assert prop.find(share_type).text == "0"
        assert prop.find(cloud.Size) is None
        assert [p.text for p in prop] == ["0", "3"]
        assert Property(cloud.Size).value == Empty()
        assert Property(cloud.Size).children == []

    def test_response_path(self):
        """path should strip host and percent-encoding from the href."""
        ms = decode(NEXTCLOUD_LISTING)
        assert ms.responses[1].path == "/remote.php/dav/files/alice/Documents/My Notes.md"
        ms = decode(SIMPLE.replace("/f", "https://cloud.example.com/a%20b"))
        assert ms.responses[0].path == "/a b"


class TestXMLBuilders:
    """Test XML building functions."""

    def test_build_propfind_body_minimal(self):
        """Minimal propfind should produce valid XML with an empty prop."""
        body = build_propfind_body(PropFind())
        assert body.startswith(b"<?xml")
        root = etree.fromstring(body)
        assert root.tag == "{DAV:}propfind"
        assert len(root) == 1
        assert root[0].tag == "{DAV:}prop"
        assert len(root[0]) == 0

    def test_build_propfind_body_with_props(self):
        """Propfind with properties should include them, in order."""
        body = build_propfind_body(
            PropFind([dav.GetLastModified, cloud.FileId, cloud.ShareTypes])
        )
        root = etree.fromstring(body)
        assert [child.tag for child in root[0]] == [
            "{DAV:}getlastmodified",
            "{http://owncloud.org/ns}fileid",
            "{http://nextcloud.org/ns}share-types",
        ]

    def test_propfind_envelope_declares_each_prefix_once(self):
        """The namespace declaration block must be well-formed and unique."""
        xml = encode_propfind(PropFind([cloud.Size]))
        for prefix, uri in nsmap.items():
            assert xml.count(f'xmlns:{prefix}="{uri}"') == 1
        assert "<oc:size/>" in xml
        assert not xml.startswith("<?xml")
        root = etree.fromstring(xml.encode("utf-8"))
        assert root.nsmap == nsmap

    def test_propfind_unknown_prefix(self):
        """Tags in unregistered namespaces can't be encoded."""
        with pytest.raises(error.EncodeError):
            encode_propfind(PropFind([TagIdentity("x", "custom")]))

    def test_propfind_extra_namespaces(self):
        """Extra namespaces get declared and used."""
        xml = encode_propfind(
            PropFind([TagIdentity("x", "custom")]),
            namespaces={"x": "urn:example:x"},
        )
        assert 'xmlns:x="urn:example:x"' in xml
        assert "<x:custom/>" in xml

    def test_build_proppatch_body(self):
        """Proppatch should contain set and remove blocks."""
        body = build_proppatch_body(
            PropPatch(
                set_props=[Property(cloud.Favorite, Text("1"))],
                remove_props=[cloud.Tags],
            )
        )
        root = etree.fromstring(body)
        assert root.tag == "{DAV:}propertyupdate"
        assert [child.tag for child in root] == ["{DAV:}set", "{DAV:}remove"]
        favorite = root.find("{DAV:}set/{DAV:}prop/{http://owncloud.org/ns}favorite")
        assert favorite.text == "1"
        assert root.find("{DAV:}remove/{DAV:}prop/{http://owncloud.org/ns}tags") is not None

    def test_proppatch_nested_and_escaped(self):
        """Children render recursively, text is escaped."""
        xml = encode_proppatch(
            PropPatch(
                set_props=[
                    Property(dav.DisplayName, Text("a < b & c")),
                    Property(
                        cloud.Checksums,
                        Children([Property(cloud.Checksum, Text("SHA1:abc"))]),
                    ),
                ]
            )
        )
        assert "a &lt; b &amp; c" in xml
        assert "<oc:checksums><oc:checksum>SHA1:abc</oc:checksum></oc:checksums>" in xml
        assert "remove" not in xml

    def test_proppatch_unencodable_text(self):
        """Text with no XML representation raises EncodeError."""
        with pytest.raises(error.EncodeError):
            encode_proppatch(PropPatch([Property(dav.DisplayName, Text("a\x01b"))]))
        with pytest.raises(error.EncodeError):
            build_mkcol_body([Property(dav.DisplayName, Text("\x00"))])

    def test_build_mkcol_body(self):
        """Plain MKCOL has no body, extended MKCOL sets properties."""
        assert build_mkcol_body() is None
        body = build_mkcol_body([Property(dav.DisplayName, Text("Photos"))])
        root = etree.fromstring(body)
        assert root.tag == "{DAV:}mkcol"
        assert root.find("{DAV:}set/{DAV:}prop/{DAV:}displayname").text == "Photos"


class TestXMLParsers:
    """Test XML parsing functions."""

    def test_parse_multistatus_simple(self):
        """The canonical single-property scenario."""
        result = decode(SIMPLE)

        assert isinstance(result, MultiStatus)
        assert len(result.responses) == 1
        response = result.responses[0]
        assert response.href == "/f"
        assert len(response.prop_stats) == 1
        prop_stat = response.prop_stats[0]
        assert prop_stat.status == PropStatStatus.OK
        assert prop_stat.status_line == "HTTP/1.1 200 OK"
        assert prop_stat.properties == [Property(TagIdentity("oc", "size"), Text("42"))]
        assert result.warnings == []

    def test_parse_bytes_and_text_alike(self):
        """Idempotence: same buffer, same tree, str or bytes."""
        assert decode(SIMPLE) == decode(SIMPLE)
        assert decode(SIMPLE) == decode(SIMPLE.encode("utf-8"))
        assert decode(NEXTCLOUD_LISTING) == decode(NEXTCLOUD_LISTING)

    def test_parse_nextcloud_listing(self):
        """A realistic listing with several propstats and responses."""
        result = decode(NEXTCLOUD_LISTING)
        assert [r.href for r in result.responses] == [
            "/remote.php/dav/files/alice/Documents/",
            "/remote.php/dav/files/alice/Documents/My%20Notes.md",
        ]
        folder = result.responses[0]
        assert [ps.status for ps in folder.prop_stats] == [
            PropStatStatus.OK,
            PropStatStatus.NOT_FOUND,
        ]
        assert folder.find(cloud.Size).text == "1024"
        assert folder.find(dav.ResourceType).children == [Property(dav.Collection)]
        assert folder.properties(PropStatStatus.NOT_FOUND) == [
            Property(dav.GetContentType)
        ]

        note = result.responses[1]
        assert note.find(dav.ResourceType).value == Empty()
        assert note.find(cloud.ShareTypes).value == Empty()

    def test_sibling_share_types_keep_order(self):
        """Sibling elements inside one property appear in document order."""
        share_types = decode(NEXTCLOUD_LISTING).responses[0].find(cloud.ShareTypes)
        assert share_types.children == [
            Property(cloud.ShareType, Text("0")),
            Property(cloud.ShareType, Text("3")),
        ]

    def test_deep_nesting(self):
        """Property trees deeper than one level keep structure and order."""
        xml = (
            "<d:multistatus><d:response><d:href>/x</d:href><d:propstat><d:prop>"
            "<nc:a><nc:b><nc:c><nc:d>deep</nc:d><nc:e/></nc:c>"
            "<nc:f>after</nc:f></nc:b></nc:a>"
            "</d:prop></d:propstat></d:response></d:multistatus>"
        )
        (prop,) = decode(xml).responses[0].prop_stats[0].properties

        def nc(name):
            return TagIdentity("nc", name)

        assert prop == Property(
            nc("a"),
            Children([
                Property(
                    nc("b"),
                    Children([
                        Property(
                            nc("c"),
                            Children([Property(nc("d"), Text("deep")), Property(nc("e"))]),
                        ),
                        Property(nc("f"), Text("after")),
                    ]),
                )
            ]),
        )

    def test_very_deep_nesting(self):
        """Hundreds of levels are fine; frames are not limited to fixed slots."""
        depth = 200
        inner = "".join(f"<oc:l{i}>" for i in range(depth))
        inner += "bottom"
        inner += "".join(f"</oc:l{i}>" for i in reversed(range(depth)))
        xml = (
            "<d:multistatus><d:response><d:href>/x</d:href><d:propstat><d:prop>"
            + inner
            + "</d:prop></d:propstat></d:response></d:multistatus>"
        )
        prop = decode(xml).responses[0].prop_stats[0].properties[0]
        for i in range(depth - 1):
            assert prop.tag == TagIdentity("oc", f"l{i}")
            assert len(prop.children) == 1
            prop = prop.children[0]
        assert prop.text == "bottom"

    def test_declared_prefixes_are_canonicalized(self):
        """D: bound to DAV: compares equal to d:, default namespaces too."""
        xml = b"""<?xml version="1.0" encoding="utf-8"?>
        <D:multistatus xmlns:D="DAV:" xmlns:O="http://owncloud.org/ns">
            <D:response>
                <D:href>/files/</D:href>
                <D:propstat>
                    <D:prop>
                        <D:displayname>My Files</D:displayname>
                        <size xmlns="http://owncloud.org/ns">5</size>
                        <O:fileid>77</O:fileid>
                    </D:prop>
                    <D:status>HTTP/1.1 200 OK</D:status>
                </D:propstat>
            </D:response>
        </D:multistatus>"""
        response = decode(xml).responses[0]
        assert response.href == "/files/"
        assert [p.tag for p in response.properties()] == [
            dav.DisplayName,
            cloud.Size,
            cloud.FileId,
        ]
        assert response.find(dav.DisplayName).text == "My Files"

    def test_unknown_namespace_uses_uri(self):
        """Prefixes bound to unregistered URIs are replaced by the URI."""
        xml = (
            '<d:multistatus xmlns:d="DAV:" xmlns:s="http://sabredav.org/ns"'
            ' xmlns:oc="urn:other">'
            "<d:response><d:href>/x</d:href><d:propstat><d:prop>"
            "<s:custom>v</s:custom><oc:size>1</oc:size>"
            "</d:prop></d:propstat></d:response></d:multistatus>"
        )
        custom, size = decode(xml).responses[0].properties()
        assert custom.tag == TagIdentity("http://sabredav.org/ns", "custom")
        assert size.tag == TagIdentity("urn:other", "size")
        assert size.tag != cloud.Size

    def test_response_status_and_sync_token(self):
        """href + status responses and the sync-token are kept."""
        xml = b"""<?xml version="1.0"?>
        <d:multistatus xmlns:d="DAV:">
            <d:response>
                <d:href>/files/gone.txt</d:href>
                <d:status>HTTP/1.1 404 Not Found</d:status>
            </d:response>
            <d:sync-token>http://example.com/ns/sync/42</d:sync-token>
            <d:responsedescription>partial listing</d:responsedescription>
        </d:multistatus>"""
        result = decode(xml)
        assert result.sync_token == "http://example.com/ns/sync/42"
        assert result.description == "partial listing"
        response = result.responses[0]
        assert response.status == PropStatStatus.NOT_FOUND
        assert response.prop_stats == []

    def test_propstat_without_status_is_ok(self):
        """A propstat with no d:status resolves to OK."""
        xml = (
            "<d:multistatus><d:response><d:href>/x</d:href><d:propstat><d:prop>"
            "<oc:size>1</oc:size></d:prop></d:propstat></d:response></d:multistatus>"
        )
        prop_stat = decode(xml).responses[0].prop_stats[0]
        assert prop_stat.status == PropStatStatus.OK
        assert prop_stat.status_line is None

    def test_server_error_status(self):
        """Status lines outside the mapped ones become UnknownStatus."""
        xml = SIMPLE.replace("HTTP/1.1 200 OK", "HTTP/1.1 507 Insufficient Storage")
        prop_stat = decode(xml).responses[0].prop_stats[0]
        assert prop_stat.status == UnknownStatus.UNKNOWN_SERVER_ERROR

    def test_response_description_variants(self):
        """Both the RFC spelling and the dashed one are understood."""
        for name in ("responsedescription", "response-description"):
            xml = SIMPLE.replace(
                "</d:propstat>",
                f"</d:propstat><d:{name}>all good</d:{name}>",
            )
            assert decode(xml).responses[0].description == "all good"

    def test_missing_href_defaults_to_empty(self):
        """A response without href gets an empty href."""
        xml = SIMPLE.replace("<d:href>/f</d:href>", "")
        assert decode(xml).responses[0].href == ""

    def test_href_is_unescaped(self):
        """XML escapes in href are resolved."""
        xml = SIMPLE.replace("/f", "/a&amp;b")
        assert decode(xml).responses[0].href == "/a&b"

    def test_text_is_trimmed(self):
        """Surrounding whitespace is not part of a value."""
        xml = SIMPLE.replace("<oc:size>42</oc:size>", "<oc:size>\n   42\n  </oc:size>")
        assert decode(xml).responses[0].find(cloud.Size).text == "42"

    def test_text_runs_accumulate(self):
        """Text split by a comment is one value."""
        xml = SIMPLE.replace("42", "4<!-- two -->2")
        assert decode(xml).responses[0].find(cloud.Size).text == "42"

    def test_mixed_content_keeps_children(self):
        """Text followed by a child element gives way to the children."""
        xml = SIMPLE.replace("42", "stray<oc:inner>1</oc:inner>")
        size = decode(xml).responses[0].find(cloud.Size)
        assert size.children == [Property(TagIdentity("oc", "inner"), Text("1"))]

    def test_unknown_elements_are_ignored(self):
        """Unrecognized structure outside d:prop doesn't disturb the tree."""
        xml = SIMPLE.replace(
            "<d:href>/f</d:href>",
            "<d:href>/f</d:href><x:extra><d:prop><oc:size>1</oc:size></d:prop></x:extra>",
        )
        response = decode(xml).responses[0]
        assert response.href == "/f"
        assert response.properties() == [Property(cloud.Size, Text("42"))]

    def test_error_element(self):
        """d:error is kept as a property tree on the propstat."""
        xml = SIMPLE.replace(
            "<d:status>HTTP/1.1 200 OK</d:status>",
            "<d:status>HTTP/1.1 403 Forbidden</d:status>"
            "<d:error><d:cannot-modify-protected-property/></d:error>",
        )
        prop_stat = decode(xml).responses[0].prop_stats[0]
        assert prop_stat.status == PropStatStatus.FORBIDDEN
        assert prop_stat.error.children == [Property(dav.CannotModifyProtectedProperty)]

    def test_undefined_entity_degrades_with_warning(self):
        """A text run that can't be unescaped becomes empty, with a warning."""
        xml = SIMPLE.replace(
            "</d:prop>", "<d:displayname>a&nbsp;b</d:displayname></d:prop>"
        )
        result = decode(xml)
        response = result.responses[0]
        assert response.find(cloud.Size).text == "42"
        assert response.find(dav.DisplayName).text == ""
        assert len(result.warnings) == 1
        assert result.warnings[0].tag == dav.DisplayName
        assert "&nbsp;" in result.warnings[0].reason

    @pytest.mark.parametrize(
        "body",
        [
            "",
            b"",
            "   \n",
            "Internal Server Error",
            "<d:error><d:message>nope</d:message></d:error>",
            '<?xml version="1.0"?><html><body>login</body></html>',
            "<d:multistatus><d:response><d:href>/f</d:href>",
        ],
    )
    def test_no_content(self, body):
        """Nothing multistatus-like is NoContent, never Malformed."""
        with pytest.raises(error.NoContentError):
            decode(body)

    def test_malformed(self):
        """Tokenizer failures are reported as MalformedError."""
        with pytest.raises(error.MalformedError) as excinfo:
            decode("<d:multistatus><d:response></d:multistatus>")
        assert excinfo.value.line == 1
        assert isinstance(excinfo.value, error.DecodeError)

    def test_propfind_round_trip(self):
        """Tags requested with PROPFIND come back as the same identities."""
        requested = [dav.GetLastModified, dav.GetEtag, cloud.FileId, nsmap_tag("nc", "has-preview")]
        request_root = etree.fromstring(encode_propfind(PropFind(requested)).encode())
        answer = etree.Element("{DAV:}multistatus", nsmap=nsmap)
        response = etree.SubElement(answer, "{DAV:}response")
        etree.SubElement(response, "{DAV:}href").text = "/f"
        propstat = etree.SubElement(response, "{DAV:}propstat")
        prop = etree.SubElement(propstat, "{DAV:}prop")
        for child in request_root.find("{DAV:}prop"):
            etree.SubElement(prop, child.tag).text = "v"
        etree.SubElement(propstat, "{DAV:}status").text = "HTTP/1.1 200 OK"

        result = decode(etree.tostring(answer))
        assert [p.tag for p in result.responses[0].properties()] == requested

    def test_parse_propfind_response(self):
        """PROPFIND 404 gives an empty result, errors raise."""
        assert parse_propfind_response(b"", status_code=404) == MultiStatus()
        assert len(parse_propfind_response(NEXTCLOUD_LISTING).responses) == 2
        with pytest.raises(error.PropfindError):
            parse_propfind_response(b"", status_code=500)

    def test_parse_proppatch_response(self):
        """A bodiless 200 PROPPATCH is an empty MultiStatus."""
        assert parse_proppatch_response(b"", status_code=200) == MultiStatus()
        with pytest.raises(error.ProppatchError):
            parse_proppatch_response(b"", status_code=423)


def nsmap_tag(prefix, name):
    return TagIdentity(prefix, name)


class TestNextcloudDAVProtocol:
    """Test the request/response glue."""

    def test_propfind_request(self):
        """The PROPFIND request carries depth, auth and body."""
        protocol = NextcloudDAVProtocol(
            base_url="https://cloud.example.com/remote.php/dav/files/alice/",
            username="alice",
            password="secret",
        )
        request = protocol.propfind_request("Documents/", PropFind([cloud.Size], depth=1))
        assert request.method == DAVMethod.PROPFIND
        assert request.url == "https://cloud.example.com/remote.php/dav/files/alice/Documents/"
        assert request.headers["Depth"] == "1"
        assert request.headers["Authorization"].startswith("Basic ")
        assert b"<oc:size/>" in request.body

    def test_propfind_request_infinity(self):
        """DEPTH_INFINITY maps to the literal header value."""
        protocol = NextcloudDAVProtocol()
        request = protocol.propfind_request(
            "https://other.example.com/x", PropFind(depth=DEPTH_INFINITY)
        )
        assert request.headers["Depth"] == "infinity"
        assert request.url == "https://other.example.com/x"
        assert "Authorization" not in request.headers

    def test_proppatch_request(self):
        protocol = NextcloudDAVProtocol(base_url="https://cloud.example.com/dav")
        request = protocol.proppatch_request(
            "/a.txt", PropPatch(set_props=[Property(cloud.Favorite, Text("1"))])
        )
        assert request.method == DAVMethod.PROPPATCH
        assert request.url == "https://cloud.example.com/dav/a.txt"
        assert b"propertyupdate" in request.body

    def test_mkcol_request(self):
        """A plain MKCOL has neither body nor content type."""
        protocol = NextcloudDAVProtocol(base_url="https://cloud.example.com/dav")
        request = protocol.mkcol_request("new/")
        assert request.method == DAVMethod.MKCOL
        assert request.body is None
        assert "Content-Type" not in request.headers

    def test_parse_responses(self):
        protocol = NextcloudDAVProtocol()
        result = protocol.parse_propfind_response(
            DAVResponse(status=207, headers={}, body=NEXTCLOUD_LISTING)
        )
        assert len(result.responses) == 2
        assert (
            protocol.parse_mkcol_response(DAVResponse(status=201, headers={}, body=b""))
            == MkColStatus.CREATED
        )
        with pytest.raises(error.AuthorizationError):
            protocol.parse_mkcol_response(DAVResponse(status=401, headers={}, body=b""))

    def test_authorization_error_message(self):
        """The response body shows up as text in the error reason."""
        protocol = NextcloudDAVProtocol()
        with pytest.raises(error.AuthorizationError) as excinfo:
            protocol.parse_mkcol_response(
                DAVResponse(status=401, headers={}, body=b"Login required")
            )
        assert excinfo.value.reason == "401 Unauthorized\n\nLogin required"
        assert "b'" not in str(excinfo.value)
