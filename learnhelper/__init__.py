"""
learnhelper: client for the university course portal.

    from learnhelper import LearnHelper

    helper = await LearnHelper.login(username, password)

learnhelper.blocking.LearnHelper offers the same operations without asyncio.
"""

from learnhelper.client import LearnHelper
from learnhelper.errors import (
    AuthError,
    DecodeError,
    DomainFailure,
    LearnHelperError,
    NetworkError,
    ParseError,
    SessionClosedError,
    TicketNotFoundError,
)

__all__ = [
    "LearnHelper",
    "LearnHelperError",
    "NetworkError",
    "AuthError",
    "TicketNotFoundError",
    "DecodeError",
    "ParseError",
    "DomainFailure",
    "SessionClosedError",
]
