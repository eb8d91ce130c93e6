"""
Status line interpretation.

A d:status element carries an HTTP status line such as
``HTTP/1.1 404 Not Found``.  These functions map it onto the enumerations
in types.py, falling back to an UnknownStatus classified by status class.
"""

from typing import Optional
from typing import Union

from ncdav.elements import dav

from .types import MkColStatus
from .types import Property
from .types import PropPatchStatus
from .types import PropStatStatus
from .types import PropStatus
from .types import UnknownStatus

_propstat_statuses = {s.value: s for s in PropStatStatus}

_proppatch_statuses = {
    200: PropPatchStatus.OK,
    403: PropPatchStatus.FORBIDDEN,
    409: PropPatchStatus.CONFLICT,
    424: PropPatchStatus.FAILED_DEPENDENCY,
    507: PropPatchStatus.INSUFFICIENT_STORAGE,
}

_mkcol_statuses = {s.value: s for s in MkColStatus}


def status_code(status: Optional[str]) -> Optional[int]:
    """
    Extract the status code from a status line like "HTTP/1.1 200 OK".

    Returns None when there is no three-digit code in the second field.
    """
    if not status:
        return None

    parts = status.split()
    if len(parts) >= 2 and len(parts[1]) == 3:
        try:
            return int(parts[1])
        except ValueError:
            pass

    return None


def unknown(code: Optional[int]) -> UnknownStatus:
    """
    Classify a code nobody mapped.  Only 2xx and 5xx get their own
    class; unparseable lines, 1xx and 3xx count as client errors.
    """
    if code is not None:
        if 200 <= code < 300:
            return UnknownStatus.UNKNOWN_SUCCESS
        if 500 <= code < 600:
            return UnknownStatus.UNKNOWN_SERVER_ERROR
    return UnknownStatus.UNKNOWN_CLIENT_ERROR


def interpret(text: Optional[str]) -> PropStatus:
    """Map the content of a propstat's d:status onto a PropStatus."""
    code = status_code(text)
    if code in _propstat_statuses:
        return _propstat_statuses[code]
    return unknown(code)


def interpret_proppatch(
    text: Optional[str], error: Optional[Property] = None
) -> Union[PropPatchStatus, UnknownStatus]:
    """
    Map a PROPPATCH propstat status line.  ``error`` is the d:error element
    of the same propstat (or response); a 403 with the
    cannot-modify-protected-property precondition is reported as
    FORBIDDEN_PROTECTED_PROPERTY.
    """
    code = status_code(text)
    if code == 403 and error is not None:
        if error.find(dav.CannotModifyProtectedProperty) is not None:
            return PropPatchStatus.FORBIDDEN_PROTECTED_PROPERTY
    if code in _proppatch_statuses:
        return _proppatch_statuses[code]
    return unknown(code)


def interpret_mkcol(status: Union[int, str, None]) -> Union[MkColStatus, UnknownStatus]:
    """
    MKCOL answers with a plain HTTP status, so both the integer code and a
    status line are accepted.
    """
    code = status if isinstance(status, int) else status_code(status)
    if code in _mkcol_statuses:
        return _mkcol_statuses[code]
    return unknown(code)
