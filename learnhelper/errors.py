"""
Exceptions raised by learnhelper.

Every error the library raises derives from LearnHelperError, so callers can
catch one type. The subclasses tell apart where things went wrong:

- NetworkError      the HTTP exchange itself failed (transport or status)
- AuthError         login did not yield a ticket
- DecodeError       a JSON envelope or a record field could not be decoded
- ParseError        a required piece of HTML markup is missing
- DomainFailure     the portal answered, but without its success marker
- SessionClosedError  the session was used after logout
"""

from __future__ import annotations

from typing import Any


class LearnHelperError(Exception):
    """Base class for all learnhelper errors."""


class NetworkError(LearnHelperError):
    """Transport or HTTP status failure. The library exception is chained as __cause__."""


class AuthError(LearnHelperError):
    pass


class TicketNotFoundError(AuthError):
    def __init__(self) -> None:
        super().__init__("failed to login: no ticket in login response")


class DecodeError(LearnHelperError):
    """
    A JSON value could not be turned into a record.

    `field` is the portal's key for the offending field ("<body>" or
    "<envelope>" when the response as a whole is malformed) and `raw` is the
    value as it was received.
    """

    def __init__(self, field: str, raw: Any, reason: str = "") -> None:
        self.field = field
        self.raw = raw
        self.reason = reason
        msg = f"cannot decode field {field!r} from {raw!r}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class ParseError(LearnHelperError):
    def __init__(self, what: str) -> None:
        self.what = what
        super().__init__(f"invalid html: {what} not found")


class DomainFailure(LearnHelperError):
    """The request went through, but the response body lacks the success marker."""

    def __init__(self, action: str, body: str = "") -> None:
        self.action = action
        self.body = body
        super().__init__(f"failed to {action}")


class SessionClosedError(LearnHelperError):
    def __init__(self) -> None:
        super().__init__("session has been logged out")
