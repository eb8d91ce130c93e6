#!/usr/bin/env python
import logging
import os
from typing import Optional

from ncdav import __version__
from ncdav.lib.python_utilities import to_local

## Environmental variables prepended with "PYTHON_NCDAV" are used for debug purposes.
## one of DEBUG_PDB, DEBUG, DEVELOPMENT, PRODUCTION
debugmode = os.environ.get("PYTHON_NCDAV_DEBUGMODE")
if not debugmode:
    if "dev" in __version__ or __version__ == "(unknown)":
        debugmode = "DEVELOPMENT"
    else:
        debugmode = "PRODUCTION"

log = logging.getLogger("ncdav")
if debugmode.startswith("DEBUG"):
    log.setLevel(logging.DEBUG)
else:
    log.setLevel(logging.WARNING)


def errmsg(r) -> str:
    """Utility for formatting an error response to an error string"""
    return "%s %s\n\n%s" % (r.status, r.reason, to_local(r.body))


def weirdness(*reasons):
    from ncdav.lib.debug import xmlstring

    reason = " : ".join([xmlstring(x) for x in reasons])
    log.warning(f"Deviation from expectations found: {reason}")
    if debugmode == "DEBUG_PDB":
        log.error(f"Dropping into debugger due to {reason}")
        import pdb

        pdb.set_trace()


def assert_(condition: object) -> None:
    try:
        assert condition
    except AssertionError:
        if debugmode == "PRODUCTION":
            log.error(
                "Deviation from expectations found.  %s" % ERR_FRAGMENT, exc_info=True
            )
        elif debugmode == "DEBUG_PDB":
            log.error("Deviation from expectations found.  Dropping into debugger")
            import pdb

            pdb.set_trace()
        else:
            raise


ERR_FRAGMENT: str = "Please consider raising an issue on the ncdav issue tracker, include this error, the traceback (if any) and the server software and version you are using"


class DAVError(Exception):
    url: Optional[str] = None
    reason: str = "no reason"

    def __init__(self, url: Optional[str] = None, reason: Optional[str] = None) -> None:
        if url:
            self.url = url
        if reason:
            self.reason = reason

    def __str__(self) -> str:
        return "%s at '%s', reason %s" % (
            self.__class__.__name__,
            self.url,
            self.reason,
        )


class DecodeError(DAVError):
    """
    A multistatus body could not be turned into a MultiStatus tree.
    """

    pass


class NoContentError(DecodeError):
    """
    The body carried no d:multistatus document: it was empty, not XML
    at all, had another root element, or ended before the root closed.
    """

    reason = "no multistatus element found"


class MalformedError(DecodeError):
    """
    The tokenizer gave up on the body.  line and column point at the
    offending position, as reported by expat.
    """

    line: Optional[int] = None
    column: Optional[int] = None

    def __init__(
        self,
        url: Optional[str] = None,
        reason: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        super(MalformedError, self).__init__(url, reason)
        self.line = line
        self.column = column


class EncodeError(DAVError):
    pass


class AuthorizationError(DAVError):
    """
    The server answered 401.  The reason property will contain the
    status and whatever body the server sent along.
    """

    pass


class PropfindError(DAVError):
    pass


class ProppatchError(DAVError):
    pass

