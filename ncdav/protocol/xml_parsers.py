"""
Pure functions for parsing WebDAV multistatus response bodies.

The body is tokenized into a flat stream of start / character data / end
events, and a stack of frames (one per open element) rebuilds the
multistatus -> response -> propstat -> prop -> property tree from it.
Property frames nest to any depth.

All functions in this module are pure - they take XML in and return
structured data out, with no side effects or I/O.
"""

import logging
from xml.parsers import expat

from ncdav.elements import dav
from ncdav.lib import error
from ncdav.lib.python_utilities import is_blank

from .status import interpret
from .tags import TagIdentity, canonical, declarations_in, resolve
from .types import (
    Children,
    DecodeWarning,
    Empty,
    MultiStatus,
    Property,
    PropStat,
    Response,
    Text,
)

log = logging.getLogger(__name__)

_DESCRIPTION_TAGS = (dav.ResponseDescription, dav.ResponseDescriptionDashed)

## expat errors meaning "the input stopped before the document was complete"
_TRUNCATED = frozenset(
    expat.errors.codes[message]
    for message in (
        expat.errors.XML_ERROR_NO_ELEMENTS,
        expat.errors.XML_ERROR_UNCLOSED_TOKEN,
        expat.errors.XML_ERROR_PARTIAL_CHAR,
    )
)


class _Frame:
    """
    An open element.  Subclasses decide which frame a child element gets,
    what to do with character data, and how to hand their result to the
    parent frame when the element closes.
    """

    def __init__(self, tag: TagIdentity) -> None:
        self.tag = tag

    def open(self, tag: TagIdentity) -> "_Frame":
        return _IgnoredFrame(tag)

    def text(self, text: str) -> None:
        pass

    def set(self, name: str, value) -> None:
        pass

    def close(self, parent: "_Frame") -> None:
        pass


class _IgnoredFrame(_Frame):
    """Unrecognized element outside a prop container.  Kept for balance only."""


class _DocumentFrame(_Frame):
    """Bottom of the stack.  Only a d:multistatus root produces a result."""

    def __init__(self) -> None:
        super().__init__(TagIdentity("", ""))
        self.result: MultiStatus | None = None

    def open(self, tag: TagIdentity) -> _Frame:
        if tag == dav.MultiStatus:
            return _MultiStatusFrame(tag)
        log.debug(f"root element is {tag}, not {dav.MultiStatus}")
        return _IgnoredFrame(tag)

    def set(self, name: str, value) -> None:
        self.result = value


class _FieldFrame(_Frame):
    """
    d:href, d:status, d:responsedescription and d:sync-token: their text
    goes straight into a field of the parent.
    """

    def __init__(self, tag: TagIdentity, name: str) -> None:
        super().__init__(tag)
        self.name = name
        self.value: str | None = None

    def text(self, text: str) -> None:
        self.value = text if self.value is None else self.value + text

    def close(self, parent: _Frame) -> None:
        if self.value is not None:
            parent.set(self.name, self.value)


class _MultiStatusFrame(_Frame):
    def __init__(self, tag: TagIdentity) -> None:
        super().__init__(tag)
        self.node = MultiStatus()

    def open(self, tag: TagIdentity) -> _Frame:
        if tag == dav.Response:
            return _ResponseFrame(tag)
        if tag in _DESCRIPTION_TAGS:
            return _FieldFrame(tag, "description")
        if tag == dav.SyncToken:
            return _FieldFrame(tag, "sync_token")
        return _IgnoredFrame(tag)

    def set(self, name: str, value) -> None:
        setattr(self.node, name, value)

    def close(self, parent: _Frame) -> None:
        parent.set("multistatus", self.node)


class _ResponseFrame(_Frame):
    def __init__(self, tag: TagIdentity) -> None:
        super().__init__(tag)
        self.node = Response()

    def open(self, tag: TagIdentity) -> _Frame:
        if tag == dav.Href:
            return _FieldFrame(tag, "href")
        if tag == dav.PropStat:
            return _PropStatFrame(tag)
        if tag == dav.Status:
            return _FieldFrame(tag, "status")
        if tag in _DESCRIPTION_TAGS:
            return _FieldFrame(tag, "description")
        if tag == dav.Error:
            return _ErrorFrame(tag)
        return _IgnoredFrame(tag)

    def set(self, name: str, value) -> None:
        if name == "status":
            value = interpret(value)
        setattr(self.node, name, value)

    def close(self, parent: _Frame) -> None:
        if not self.node.href:
            error.weirdness("d:response without d:href")
        parent.node.responses.append(self.node)


class _PropStatFrame(_Frame):
    def __init__(self, tag: TagIdentity) -> None:
        super().__init__(tag)
        self.node = PropStat()

    def open(self, tag: TagIdentity) -> _Frame:
        if tag == dav.Prop:
            return _PropContainerFrame(tag)
        if tag == dav.Status:
            return _FieldFrame(tag, "status")
        if tag in _DESCRIPTION_TAGS:
            return _FieldFrame(tag, "description")
        if tag == dav.Error:
            return _ErrorFrame(tag)
        return _IgnoredFrame(tag)

    def set(self, name: str, value) -> None:
        if name == "status":
            self.node.status_line = value
            value = interpret(value)
        setattr(self.node, name, value)

    def close(self, parent: _Frame) -> None:
        parent.node.prop_stats.append(self.node)


class _PropContainerFrame(_Frame):
    """d:prop.  Every child element is a property."""

    def __init__(self, tag: TagIdentity) -> None:
        super().__init__(tag)
        self.props: list[Property] = []

    def open(self, tag: TagIdentity) -> _Frame:
        return _PropertyFrame(tag)

    def add(self, prop: Property) -> None:
        self.props.append(prop)

    def close(self, parent: _Frame) -> None:
        parent.node.properties.extend(self.props)


class _PropertyFrame(_Frame):
    """
    A property at any depth below d:prop.  The value starts out Empty and
    becomes Text or Children depending on what shows up first.
    """

    def __init__(self, tag: TagIdentity) -> None:
        super().__init__(tag)
        self.prop = Property(tag)

    def open(self, tag: TagIdentity) -> _Frame:
        return _PropertyFrame(tag)

    def text(self, text: str) -> None:
        value = self.prop.value
        if isinstance(value, Empty):
            self.prop.value = Text(text)
        elif isinstance(value, Text):
            value.text += text
        else:
            error.weirdness(f"text after child elements in {self.tag} dropped", text)

    def add(self, prop: Property) -> None:
        value = self.prop.value
        if isinstance(value, Children):
            value.props.append(prop)
            return
        if isinstance(value, Text):
            error.weirdness(f"mixed content in {self.tag}, text dropped", value.text)
        self.prop.value = Children([prop])

    def close(self, parent: _Frame) -> None:
        parent.add(self.prop)


class _ErrorFrame(_PropertyFrame):
    """d:error, kept as a Property tree on the enclosing response/propstat."""

    def close(self, parent: _Frame) -> None:
        parent.set("error", self.prop)


class _MultistatusBuilder:
    """
    Consumes tokenizer events and keeps the frame stack.  One builder per
    decode call; nothing is shared between calls.
    """

    def __init__(self) -> None:
        self.document = _DocumentFrame()
        self.stack: list[_Frame] = [self.document]
        ## in-scope namespace declarations, one mapping per open element
        self.scopes: list[dict[str, str]] = [{}]
        self.warnings: list[DecodeWarning] = []
        self.started = False
        self._characterBuffer: list[str] | None = None
        self._skipped: list[str] = []

    def parser(self) -> "expat.XMLParserType":
        ## no namespace separator: element names arrive as written (d:href)
        parser = expat.ParserCreate()
        parser.buffer_text = True
        ## pretend there is an external DTD that was not read, so undefined
        ## entities are reported through SkippedEntityHandler instead of
        ## failing the whole document
        parser.UseForeignDTD(True)
        parser.StartElementHandler = self.start
        parser.EndElementHandler = self.end
        parser.CharacterDataHandler = self.data
        parser.SkippedEntityHandler = self.skipped_entity
        return parser

    def start(self, name: str, attributes: dict[str, str]) -> None:
        self._flush()
        self.started = True

        declarations = declarations_in(attributes)
        if declarations:
            scope = {**self.scopes[-1], **declarations}
        else:
            scope = self.scopes[-1]
        self.scopes.append(scope)

        tag = canonical(resolve(name), scope)
        self.stack.append(self.stack[-1].open(tag))

    def end(self, name: str) -> None:
        self._flush()
        scope = self.scopes.pop()
        frame = self.stack.pop()
        error.assert_(frame.tag == canonical(resolve(name), scope))
        frame.close(self.stack[-1])

    def data(self, data: str) -> None:
        # Stash character data away in a list that we will "".join() when done
        if self._characterBuffer is None:
            self._characterBuffer = []
        self._characterBuffer.append(data)

    def skipped_entity(self, name: str, is_parameter_entity: bool) -> None:
        if is_parameter_entity:
            return
        if self._characterBuffer is None:
            self._characterBuffer = []
        self._skipped.append(name)

    def _flush(self) -> None:
        if self._characterBuffer is None:
            return
        text = "".join(self._characterBuffer).strip()
        self._characterBuffer = None
        top = self.stack[-1]

        if self._skipped:
            reason = "undefined entit%s %s in text, text dropped" % (
                "ies" if len(self._skipped) > 1 else "y",
                ", ".join("&%s;" % x for x in self._skipped),
            )
            self._skipped = []
            self.warnings.append(DecodeWarning(top.tag, reason))
            error.weirdness(f"{top.tag}: {reason}")
            text = ""
        elif not text:
            return

        top.text(text)

    def close(self) -> MultiStatus:
        result = self.document.result
        if result is None:
            raise error.NoContentError()
        result.warnings = self.warnings
        log.debug(f"decoded multistatus with {len(result.responses)} responses")
        return result


def decode(body: str | bytes) -> MultiStatus:
    """
    Decode a 207 Multi-Status body.

    Args:
        body: Raw XML response, text or bytes

    Returns:
        The MultiStatus tree

    Raises:
        NoContentError: Empty body, not XML at all, another root element
            than d:multistatus, or a document that ends before its root
            element is closed
        MalformedError: The tokenizer failed somewhere inside the document
    """
    if is_blank(body):
        raise error.NoContentError(reason="empty body")

    builder = _MultistatusBuilder()
    parser = builder.parser()
    try:
        parser.Parse(body, True)
    except expat.ExpatError as e:
        if not builder.started or e.code in _TRUNCATED:
            raise error.NoContentError(
                reason=f"no complete multistatus document: {e}"
            ) from e
        raise error.MalformedError(
            reason=str(e), line=e.lineno, column=e.offset
        ) from e
    return builder.close()


parse_multistatus = decode


def parse_propfind_response(
    body: str | bytes,
    status_code: int = 207,
) -> MultiStatus:
    """
    Parse a PROPFIND response.

    Args:
        body: Raw XML response bytes
        status_code: HTTP status code of the response

    Returns:
        MultiStatus; empty when the resource does not exist (404)
    """
    if status_code == 404:
        return MultiStatus()

    if status_code not in (200, 207):
        raise error.PropfindError(reason=f"PROPFIND failed with status {status_code}")

    return decode(body)


def parse_proppatch_response(
    body: str | bytes,
    status_code: int = 207,
) -> MultiStatus:
    """
    Parse a PROPPATCH response.  A plain 200/204 without body means
    everything was applied and gives an empty MultiStatus.
    """
    if status_code not in (200, 204, 207):
        raise error.ProppatchError(
            reason=f"PROPPATCH failed with status {status_code}"
        )

    if status_code != 207 and is_blank(body):
        return MultiStatus()

    return decode(body)
