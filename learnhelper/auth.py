"""
Single sign-on.

Logging in is a two-step exchange:

1. the credentials are posted to the identity host; the response page
   embeds a redirect that contains `ticket=<value>"`
2. the ticket is sent to the learning host's roam endpoint, which answers
   with the session cookies every later request relies on

The cookie jar of the HTTP client is the session; nothing else is stored.
"""

from __future__ import annotations

import logging

import httpx
import requests

from learnhelper.errors import TicketNotFoundError
from learnhelper.transport import send, send_blocking
from learnhelper.urls import PortalUrls

logger = logging.getLogger(__name__)

TICKET_MARKER = "ticket="


def extract_ticket(body: str) -> str:
    """Return the text between 'ticket=' and the next double quote."""
    start = body.find(TICKET_MARKER)
    if start < 0:
        raise TicketNotFoundError()
    start += len(TICKET_MARKER)

    end = body.find('"', start)
    if end < 0:
        raise TicketNotFoundError()
    return body[start:end]


def _credentials(username: str, password: str) -> dict:
    return {"i_user": username, "i_pass": password, "atOnce": "true"}


async def sign_in(client: httpx.AsyncClient, urls: PortalUrls, username: str, password: str) -> None:
    resp = await send(client, "POST", urls.login, data=_credentials(username, password))
    ticket = extract_ticket(resp.text)
    await send(client, "GET", urls.auth_roam(ticket))
    logger.info("logged in as %s", username)


async def sign_out(client: httpx.AsyncClient, urls: PortalUrls) -> None:
    await send(client, "POST", urls.logout)
    logger.info("logged out")


def sign_in_blocking(session: requests.Session, urls: PortalUrls, username: str, password: str) -> None:
    resp = send_blocking(session, "POST", urls.login, data=_credentials(username, password))
    ticket = extract_ticket(resp.text)
    send_blocking(session, "GET", urls.auth_roam(ticket))
    logger.info("logged in as %s", username)


def sign_out_blocking(session: requests.Session, urls: PortalUrls) -> None:
    send_blocking(session, "POST", urls.logout)
    logger.info("logged out")
