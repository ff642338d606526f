"""
Central data model definitions used across the project.

Records are frozen dataclasses built by learnhelper.decode from the portal's
JSON and, for the fields that need a secondary request, completed by the
clients with dataclasses.replace(). A record therefore never changes after
construction; "enriching" it means building a new one.

Relationships that the portal flattens into one JSON object are modelled as
composition:
- a Homework owns a HomeworkDetail (scraped from its detail page)
- a Discussion / Question owns a DiscussionBase (the fields they share)
and expose the owned fields through read-only properties.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import NamedTuple, Optional, Tuple, Union


class Attachment(NamedTuple):
    """A (display name, download url) pair scraped from a detail page."""

    name: str
    url: str


@dataclass(frozen=True)
class Course:
    id: str
    name: str
    english_name: str
    teacher_name: str
    # Normally the text of an integer, but not always.
    teacher_number: str
    course_number: str
    # int when the portal sends a valid integer, otherwise the raw text
    course_index: Union[int, str]
    # Filled by a secondary request; every course has at least one entry.
    time_location: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Notification:
    course_id: str
    id: str
    title: str
    # HTML
    content: str
    read: bool
    important: bool
    publish_time: datetime
    publisher: str
    attachment_name: Optional[str] = None
    # Filled by a secondary request when attachment_name is present.
    attachment_url: Optional[str] = None


@dataclass(frozen=True)
class File:
    id: str
    title: str
    # HTML
    description: str
    # bytes
    raw_size: int
    # e.g. "1M"
    size: str
    upload_time: datetime
    # True while the student has not opened the file yet
    new: bool
    important: bool
    visit_count: int
    download_count: int
    # suffix, e.g. "pdf"
    file_type: str


@dataclass(frozen=True)
class HomeworkDetail:
    """
    The part of a homework that only exists on its detail page.

    The three attachments are independent of each other; each one is None
    when the page has no such attachment.
    """

    description: str = ""
    answer: str = ""
    submission: str = ""
    attachment: Optional[Attachment] = None
    submit_attachment: Optional[Attachment] = None
    grade_attachment: Optional[Attachment] = None


@dataclass(frozen=True)
class Homework:
    course_id: str
    id: str
    student_homework_id: str
    title: str
    assign_time: datetime
    deadline: datetime
    submit_time: Optional[datetime] = None
    # HTML, present once the student has submitted
    submit_content: Optional[str] = None
    grade: Optional[float] = None
    grade_time: Optional[datetime] = None
    grader_name: Optional[str] = None
    grade_content: Optional[str] = None
    # None until the detail page has been fetched and parsed
    detail: Optional[HomeworkDetail] = None

    def _detail(self) -> HomeworkDetail:
        return self.detail if self.detail is not None else HomeworkDetail()

    @property
    def description(self) -> str:
        return self._detail().description

    @property
    def answer(self) -> str:
        return self._detail().answer

    @property
    def submission(self) -> str:
        return self._detail().submission

    @property
    def attachment(self) -> Optional[Attachment]:
        return self._detail().attachment

    @property
    def submit_attachment(self) -> Optional[Attachment]:
        return self._detail().submit_attachment

    @property
    def grade_attachment(self) -> Optional[Attachment]:
        return self._detail().grade_attachment


@dataclass(frozen=True)
class DiscussionBase:
    """Fields shared by discussions and questions."""

    id: str
    title: str
    # The publisher's post counts as the first reply.
    publisher_name: str
    publish_time: datetime
    last_replier_name: Optional[str]
    last_reply_time: Optional[datetime]
    visit_count: int
    reply_count: int


class _HasDiscussionBase:
    base: DiscussionBase

    @property
    def id(self) -> str:
        return self.base.id

    @property
    def title(self) -> str:
        return self.base.title

    @property
    def publisher_name(self) -> str:
        return self.base.publisher_name

    @property
    def publish_time(self) -> datetime:
        return self.base.publish_time

    @property
    def last_replier_name(self) -> Optional[str]:
        return self.base.last_replier_name

    @property
    def last_reply_time(self) -> Optional[datetime]:
        return self.base.last_reply_time

    @property
    def visit_count(self) -> int:
        return self.base.visit_count

    @property
    def reply_count(self) -> int:
        return self.base.reply_count


@dataclass(frozen=True)
class Discussion(_HasDiscussionBase):
    base: DiscussionBase
    board_id: str


@dataclass(frozen=True)
class Question(_HasDiscussionBase):
    base: DiscussionBase
    # HTML
    question: str


@dataclass(frozen=True)
class DiscussionReply:
    """
    One reply in a discussion thread.

    Top-level replies may carry sub-replies; sub-replies never do, so the
    tree is exactly two levels deep. The opening post has no id because it
    cannot be replied to or deleted.
    """

    id: Optional[str]
    author: str
    publish_time: datetime
    # HTML
    content: str
    replies: Tuple["DiscussionReply", ...] = ()
