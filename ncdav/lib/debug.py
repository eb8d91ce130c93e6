from lxml import etree

from ncdav.lib import error


def xmlstring(root):
    if isinstance(root, str):
        return root
    if isinstance(root, bytes):
        return root.decode("utf-8", errors="replace")
    if hasattr(root, "tag") and hasattr(root, "value"):
        ## a Property tree
        from ncdav.protocol.xml_builders import property_element

        try:
            root = property_element(root)
        except error.EncodeError:
            return str(root)
    try:
        return etree.tostring(root, pretty_print=True).decode("utf-8")
    except TypeError:
        return str(root)
