#!/usr/bin/env python
import logging

__version__ = "0.3.0"

from .protocol import decode
from .protocol import encode_propfind
from .protocol import encode_proppatch
from .protocol.tags import TagIdentity
from .protocol.tags import resolve
from .protocol.types import MultiStatus
from .protocol.types import Property
from .protocol.types import PropFind
from .protocol.types import PropPatch

## We should consider if the NullHandler-logic below is needed or not, and
## if there are better alternatives?
# Silence notification of no default logging handler
log = logging.getLogger("ncdav")


class NullHandler(logging.Handler):
    def emit(self, record) -> None:
        pass


log.addHandler(NullHandler())

__all__ = [
    "__version__",
    "decode",
    "encode_propfind",
    "encode_proppatch",
    "resolve",
    "MultiStatus",
    "Property",
    "PropFind",
    "PropPatch",
    "TagIdentity",
]
