#!/usr/bin/env python
from typing import Dict
from typing import Optional

## The prefixes are the ones Nextcloud and ownCloud use in their own
## responses.  The tree builder compares tags by prefix, so incoming
## documents declaring e.g. xmlns:D="DAV:" get their prefixes rewritten
## to the ones below.
nsmap: Dict[str, str] = {
    "d": "DAV:",
    "oc": "http://owncloud.org/ns",
    "nc": "http://nextcloud.org/ns",
    "ocs": "http://open-collaboration-services.org/ns",
    "ocm": "http://open-cloud-mesh.org/ns",
}

_prefix_by_uri: Dict[str, str] = {uri: prefix for prefix, uri in nsmap.items()}


def prefix_for(uri: str) -> Optional[str]:
    return _prefix_by_uri.get(uri)


def merged(namespaces: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    if not namespaces:
        return nsmap
    ret = nsmap.copy()
    ret.update(namespaces)
    return ret
