"""
Tag identities: the (namespace prefix, local name) pairs used to compare
element names while decoding, and to name properties when encoding.
"""

from dataclasses import dataclass
from typing import Dict
from typing import Mapping
from typing import Optional
from typing import Union

from ncdav.lib.namespace import prefix_for


@dataclass(frozen=True)
class TagIdentity:
    """
    A namespace-qualified element name, e.g. ``TagIdentity("oc", "size")``
    for ``<oc:size>``.  An unqualified name has an empty namespace.
    """

    namespace: str
    local_name: str

    def __str__(self) -> str:
        if self.namespace:
            return f"{self.namespace}:{self.local_name}"
        return self.local_name


def resolve(qualified_name: Union[str, bytes]) -> TagIdentity:
    """
    Split a qualified element name on its first ``:``.

    ``d:href`` gives ``("d", "href")``, ``href`` gives ``("", "href")``.
    Clark notation (``{DAV:}href``) is accepted as well; the URI is mapped
    back to its registered prefix, or kept as-is when unknown.  Never
    raises: bytes that are not valid UTF-8 are decoded with replacement
    characters.
    """
    if isinstance(qualified_name, bytes):
        qualified_name = qualified_name.decode("utf-8", errors="replace")
    name = qualified_name or ""
    if name.startswith("{") and "}" in name:
        uri, local_name = name[1:].split("}", 1)
        return TagIdentity(prefix_for(uri) or uri, local_name)
    prefix, sep, local_name = name.partition(":")
    if not sep:
        return TagIdentity("", name)
    return TagIdentity(prefix, local_name)


def canonical(
    tag: TagIdentity, declarations: Mapping[str, str]
) -> TagIdentity:
    """
    Rewrite the prefix of ``tag`` to the registered one for the namespace
    URI it is bound to in ``declarations`` (prefix -> URI, ``""`` for the
    default namespace).  A prefix bound to an unregistered URI is replaced
    by the URI itself, so ``xmlns:oc="urn:other"`` can not pass for ownCloud.
    Undeclared prefixes are kept verbatim.
    """
    uri = declarations.get(tag.namespace)
    if uri is None:
        return tag
    prefix = prefix_for(uri)
    if prefix is None:
        return TagIdentity(uri, tag.local_name)
    if prefix == tag.namespace:
        return tag
    return TagIdentity(prefix, tag.local_name)


def declarations_in(attributes: Optional[Dict[str, str]]) -> Dict[str, str]:
    """Collect the ``xmlns`` / ``xmlns:X`` declarations of a start tag."""
    ret: Dict[str, str] = {}
    if not attributes:
        return ret
    for name, value in attributes.items():
        if name == "xmlns":
            ret[""] = value
        elif name.startswith("xmlns:"):
            ret[name[6:]] = value
    return ret
