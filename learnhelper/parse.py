"""
Parsing (HTML -> structured records).

Detail pages of the portal are scraped with BeautifulSoup:

- homework detail page  -> HomeworkDetail (texts + up to three attachments)
- notification page     -> the notification's attachment link
- discussion page       -> two-level reply tree

Important rules:
- a missing required section (homework description, reply list container,
  reply author/time) is a ParseError
- a missing or malformed attachment is NOT an error, it is simply None
- document order is kept everywhere
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup
from bs4.element import Tag

from learnhelper.decode import MINUTE_FORMAT, SECOND_FORMAT
from learnhelper.errors import DomainFailure, ParseError
from learnhelper.model import Attachment, DiscussionReply, HomeworkDetail


DOWNLOAD_MARKER = "downloadUrl="
SUCCESS_MARKER = "success"

TEXT_SELECTOR = "div.list.calendar.clearfix div.fl.right div.c55"
ATTACHMENT_BLOCK_SELECTOR = "div.list.fujian.clearfix"
NOTIFICATION_ATTACHMENT_SELECTOR = "a.ml-10[href]"


# ---------------------------------------------------------------------------
# Attachments
# ---------------------------------------------------------------------------


def parse_attachment(block: Optional[Tag], prefix: str) -> Optional[Attachment]:
    """
    Extract (name, url) from one attachment block.

    Uses the first link whose target contains 'downloadUrl='. The name is the
    link's first non-blank text node, the url is `prefix` + everything after the marker.
    """
    if block is None:
        return None

    for a in block.find_all("a", href=True):
        href = a["href"]
        pos = href.find(DOWNLOAD_MARKER)
        if pos < 0:
            continue

        # first text node that is not just indentation
        name = next((s.strip() for s in a.find_all(string=True) if s.strip()), "")
        if not name:
            return None
        return Attachment(name=name, url=prefix + href[pos + len(DOWNLOAD_MARKER):])

    return None


def parse_notification_attachment(html: str, prefix: str) -> Optional[str]:
    """Return the download url of a notification's attachment, if the page has one."""
    soup = BeautifulSoup(html, "html.parser")
    a = soup.select_one(NOTIFICATION_ATTACHMENT_SELECTOR)
    if a is None:
        return None

    href = a["href"].strip()
    if not href:
        return None
    if href.startswith(("http://", "https://")):
        return href
    return prefix + href


# ---------------------------------------------------------------------------
# Homework detail page
# ---------------------------------------------------------------------------


def parse_homework_detail(html: str, prefix: str) -> HomeworkDetail:
    """
    Parse a homework detail page.

    The text sections appear in the order description, answer, submission;
    only the description is required. Attachment blocks appear in the order
    assignment, submission, grade and are taken by position.
    """
    soup = BeautifulSoup(html, "html.parser")

    texts = soup.select(TEXT_SELECTOR)
    if not texts:
        raise ParseError("homework description")

    def section(i: int) -> str:
        return texts[i].decode_contents() if i < len(texts) else ""

    blocks = soup.select(ATTACHMENT_BLOCK_SELECTOR)

    def block(i: int) -> Optional[Tag]:
        return blocks[i] if i < len(blocks) else None

    return HomeworkDetail(
        description=section(0),
        answer=section(1),
        submission=section(2),
        attachment=parse_attachment(block(0), prefix),
        submit_attachment=parse_attachment(block(1), prefix),
        grade_attachment=parse_attachment(block(2), prefix),
    )


# ---------------------------------------------------------------------------
# Discussion replies
# ---------------------------------------------------------------------------
#
# <div class="reply-list">
#   <div class="reply-item" [data-id="..."]>
#     <span class="reply-author">..</span> <span class="reply-time">..</span>
#     <div class="reply-content">..html..</div>
#     <div class="sub-replies">
#       <div class="reply-item" data-id="..."> same shape </div>
#     </div>
#   </div>
# </div>


def _own(item: Tag, cls: str) -> Optional[Tag]:
    """First element with class `cls` that belongs to `item` itself, not to a nested reply."""
    for el in item.find_all(class_=cls):
        if el.find_parent("div", class_="reply-item") is item:
            return el
    return None


def _reply_time(raw: str) -> datetime:
    for fmt in (SECOND_FORMAT, MINUTE_FORMAT):
        try:
            return datetime.strptime(raw, fmt)
        except ValueError:
            continue
    raise ParseError(f"reply time {raw!r}")


def _items(container: Tag) -> List[Tag]:
    return container.find_all("div", class_="reply-item", recursive=False)


def _parse_reply(item: Tag, nested: bool) -> DiscussionReply:
    author = _own(item, "reply-author")
    if author is None:
        raise ParseError("reply author")

    published = _own(item, "reply-time")
    if published is None:
        raise ParseError("reply time")

    content = _own(item, "reply-content")
    if content is None:
        raise ParseError("reply content")

    replies: Tuple[DiscussionReply, ...] = ()
    if nested:
        sub = _own(item, "sub-replies")
        if sub is not None:
            replies = tuple(_parse_reply(x, nested=False) for x in _items(sub))

    reply_id = (item.get("data-id") or "").strip()

    return DiscussionReply(
        id=reply_id or None,
        author=author.get_text(strip=True),
        publish_time=_reply_time(published.get_text(strip=True)),
        content=content.decode_contents().strip(),
        replies=replies,
    )


def parse_discussion_replies(html: str) -> List[DiscussionReply]:
    """
    Parse the reply tree of a discussion page.

    Returns the top-level replies in document order, each with its
    sub-replies. The first reply is the opening post and has no id.
    """
    soup = BeautifulSoup(html, "html.parser")

    container = soup.select_one("div.reply-list")
    if container is None:
        raise ParseError("reply list")

    return [_parse_reply(item, nested=True) for item in _items(container)]


# ---------------------------------------------------------------------------
# Action responses
# ---------------------------------------------------------------------------


def ensure_success(body: str, action: str) -> None:
    """Raise DomainFailure unless the response text contains the success marker."""
    if SUCCESS_MARKER not in body:
        raise DomainFailure(action, body)
