"""
Pure functions for building WebDAV XML request bodies.

All functions in this module are pure - they take data in and return XML out,
with no side effects or I/O.
"""
from typing import Dict
from typing import Iterable
from typing import Optional

from lxml import etree
from lxml.etree import _Element

from ncdav.elements import dav
from ncdav.lib import error
from ncdav.lib.namespace import merged
from ncdav.lib.python_utilities import to_str

from .tags import TagIdentity
from .types import Children
from .types import Property
from .types import PropFind
from .types import PropPatch
from .types import Text


def build_propfind_body(
    propfind: PropFind,
    namespaces: Optional[Dict[str, str]] = None,
    xml_declaration: bool = True,
) -> bytes:
    """
    Build PROPFIND request body XML.

    Args:
        propfind: The properties to request.  An empty list gives an
                  empty d:prop.
        namespaces: Extra prefix -> URI mappings for property tags outside
                    the built-in d/oc/nc/ocs/ocm namespaces.
        xml_declaration: Prepend <?xml ...?>

    Returns:
        UTF-8 encoded XML bytes
    """
    nsmap = merged(namespaces)
    root = _element(dav.Propfind, nsmap)
    prop = etree.SubElement(root, _clark(dav.Prop, nsmap))
    for tag in propfind.props:
        etree.SubElement(prop, _clark(tag, nsmap))

    return etree.tostring(root, encoding="utf-8", xml_declaration=xml_declaration)


def build_proppatch_body(
    proppatch: PropPatch,
    namespaces: Optional[Dict[str, str]] = None,
    xml_declaration: bool = True,
) -> bytes:
    """
    Build PROPPATCH request body XML.

    Properties to set are rendered recursively; text values are escaped.
    The d:set / d:remove blocks are left out when there is nothing in them.

    Args:
        proppatch: Properties to set and to remove
        namespaces: Extra prefix -> URI mappings
        xml_declaration: Prepend <?xml ...?>

    Returns:
        UTF-8 encoded XML bytes
    """
    nsmap = merged(namespaces)
    root = _element(dav.PropertyUpdate, nsmap)

    if proppatch.set_props:
        prop = _block(root, dav.Set, nsmap)
        for p in proppatch.set_props:
            property_element(p, nsmap, prop)

    if proppatch.remove_props:
        prop = _block(root, dav.Remove, nsmap)
        for tag in proppatch.remove_props:
            etree.SubElement(prop, _clark(tag, nsmap))

    return etree.tostring(root, encoding="utf-8", xml_declaration=xml_declaration)


def encode_propfind(
    propfind: PropFind, namespaces: Optional[Dict[str, str]] = None
) -> str:
    """The PROPFIND request body as text, without XML declaration."""
    return to_str(build_propfind_body(propfind, namespaces, xml_declaration=False))


def encode_proppatch(
    proppatch: PropPatch, namespaces: Optional[Dict[str, str]] = None
) -> str:
    """The PROPPATCH request body as text, without XML declaration."""
    return to_str(build_proppatch_body(proppatch, namespaces, xml_declaration=False))


def build_mkcol_body(
    props: Optional[Iterable[Property]] = None,
    namespaces: Optional[Dict[str, str]] = None,
) -> Optional[bytes]:
    """
    Build an extended MKCOL (RFC 5689) request body.

    Plain MKCOL has no body, so None is returned when there are no
    properties to set.
    """
    props = list(props or [])
    if not props:
        return None

    nsmap = merged(namespaces)
    root = _element(dav.Mkcol, nsmap)
    prop = _block(root, dav.Set, nsmap)
    for p in props:
        property_element(p, nsmap, prop)

    return etree.tostring(root, encoding="utf-8", xml_declaration=True)


def property_element(
    prop: Property,
    nsmap: Optional[Dict[str, str]] = None,
    parent: Optional[_Element] = None,
) -> _Element:
    """
    Render a Property (and its children, recursively) as an lxml element,
    as a new sub-element of ``parent`` if given.

    Raises:
        EncodeError: Unknown namespace prefix, or text that can not be
            represented in XML
    """
    if nsmap is None:
        nsmap = merged()
    if parent is None:
        elem = etree.Element(_clark(prop.tag, nsmap), nsmap=nsmap)
    else:
        elem = etree.SubElement(parent, _clark(prop.tag, nsmap))
    if isinstance(prop.value, Text):
        try:
            elem.text = prop.value.text
        except ValueError as e:
            ## control characters and the like have no XML 1.0 representation
            raise error.EncodeError(reason=f"{prop.tag}: {e}") from None
    elif isinstance(prop.value, Children):
        for child in prop.value.props:
            property_element(child, nsmap, elem)
    return elem


# Helpers


def _element(tag: TagIdentity, nsmap: Dict[str, str]) -> _Element:
    """Root element carrying the one and only namespace declaration block."""
    return etree.Element(_clark(tag, nsmap), nsmap=nsmap)


def _block(root: _Element, tag: TagIdentity, nsmap: Dict[str, str]) -> _Element:
    """Append <tag><d:prop/></tag> to root and return the d:prop."""
    block = etree.SubElement(root, _clark(tag, nsmap))
    return etree.SubElement(block, _clark(dav.Prop, nsmap))


def _clark(tag: TagIdentity, nsmap: Dict[str, str]) -> str:
    """
    Convert a TagIdentity to lxml's {uri}name notation.

    Raises:
        EncodeError: The prefix is not a known namespace
    """
    if not tag.namespace:
        return tag.local_name
    try:
        return "{%s}%s" % (nsmap[tag.namespace], tag.local_name)
    except KeyError:
        raise error.EncodeError(
            reason=f"unknown namespace prefix {tag.namespace!r} for {tag}"
        ) from None
