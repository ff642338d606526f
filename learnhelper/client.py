"""
Asynchronous portal client.

LearnHelper wraps one logged-in httpx.AsyncClient. Every list operation
follows the same shape:

    fetch the list -> unwrap + decode records -> enrich every record with a
    secondary request, all of them concurrently (try_join_all)

The first failing secondary request fails the whole operation. Records whose
JSON cannot be decoded are skipped with a warning.

Usage:

    helper = await LearnHelper.login(username, password)
    semesters = await helper.semester_id_list()
    courses = await helper.course_list(semesters[0])
    await helper.logout()
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable, List, Optional, Tuple, TypeVar

import httpx

from learnhelper.auth import sign_in, sign_out
from learnhelper.config import Settings, load_settings
from learnhelper.decode import (
    course_from_json,
    decode_records,
    discussion_from_json,
    file_from_json,
    homework_from_json,
    load_json,
    notification_from_json,
    question_from_json,
    semester_ids,
    string_list,
    unwrap,
)
from learnhelper.errors import DecodeError, LearnHelperError, NetworkError, SessionClosedError
from learnhelper.join import try_join3, try_join_all
from learnhelper.model import Course, Discussion, DiscussionReply, File, Homework, Notification, Question
from learnhelper.parse import (
    ensure_success,
    parse_discussion_replies,
    parse_homework_detail,
    parse_notification_attachment,
)
from learnhelper.transport import build_async_client, send, upload_part
from learnhelper.urls import PortalUrls

logger = logging.getLogger(__name__)

T = TypeVar("T")


def decode_list(items: List[Any], builder: Callable[[Any], T], what: str) -> List[T]:
    """decode_records(), logging every record that had to be skipped."""
    records, failures = decode_records(items, builder)
    for exc in failures:
        logger.warning("skipping %s record: %s", what, exc)
    return records


def time_location(payload: Any) -> Tuple[str, ...]:
    try:
        return string_list(payload)
    except (TypeError, ValueError) as exc:
        raise DecodeError("<time_location>", payload, str(exc)) from exc


class LearnHelper:
    """An authenticated session. Do not use it after logout()."""

    def __init__(self, client: httpx.AsyncClient, urls: PortalUrls, delete_timeout: float) -> None:
        self._client = client
        self.urls = urls
        self.delete_timeout = delete_timeout
        self._closed = False

    @classmethod
    async def login(
        cls,
        username: str,
        password: str,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> "LearnHelper":
        settings = settings if settings is not None else load_settings()
        urls = PortalUrls.from_settings(settings)
        owns_client = client is None
        if client is None:
            client = build_async_client(settings.user_agent)

        try:
            await sign_in(client, urls, username, password)
        except LearnHelperError:
            if owns_client:
                await client.aclose()
            raise

        return cls(client, urls, settings.delete_timeout)

    async def logout(self) -> None:
        client = self.client
        self._closed = True
        try:
            await sign_out(client, self.urls)
        finally:
            await client.aclose()

    async def __aenter__(self) -> "LearnHelper":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        if not self._closed:
            await self.logout()

    @property
    def client(self) -> httpx.AsyncClient:
        if self._closed:
            raise SessionClosedError()
        return self._client

    # -----------------------------------------------------------------------
    # Requests
    # -----------------------------------------------------------------------

    async def _get_text(self, url: str) -> str:
        resp = await send(self.client, "GET", url)
        return resp.text

    async def _get_json(self, url: str) -> Any:
        return load_json(await self._get_text(url))

    async def _post_form(self, url: str, data: dict, file: Optional[Tuple[str, bytes]]) -> str:
        resp = await send(self.client, "POST", url, data=data, files=upload_part(file))
        return resp.text

    # -----------------------------------------------------------------------
    # Lists
    # -----------------------------------------------------------------------

    async def semester_id_list(self) -> List[str]:
        return semester_ids(await self._get_json(self.urls.semester_list))

    async def course_list(self, semester: str) -> List[Course]:
        payload = await self._get_json(self.urls.course_list(semester))
        courses = decode_list(unwrap(payload), course_from_json, "course")

        async def with_time_location(course: Course) -> Course:
            tl = time_location(await self._get_json(self.urls.course_time_location(course.id)))
            return replace(course, time_location=tl)

        return await try_join_all(with_time_location(c) for c in courses)

    async def notification_list(self, course: str) -> List[Notification]:
        payload = await self._get_json(self.urls.notification_list(course))
        notifications = decode_list(unwrap(payload), notification_from_json, "notification")

        async def with_attachment(n: Notification) -> Notification:
            if n.attachment_name is None:
                return n
            html = await self._get_text(self.urls.notification_url(n))
            return replace(n, attachment_url=parse_notification_attachment(html, self.urls.prefix))

        return await try_join_all(with_attachment(n) for n in notifications)

    async def file_list(self, course: str) -> List[File]:
        payload = await self._get_json(self.urls.file_list(course))
        return decode_list(unwrap(payload), file_from_json, "file")

    async def _homework_with_detail(self, homework: Homework) -> Homework:
        html = await self._get_text(self.urls.homework_url(homework))
        detail = parse_homework_detail(html, self.urls.prefix)
        return replace(homework, detail=detail)

    async def _homework_sublist(self, url: str) -> List[Homework]:
        payload = await self._get_json(url)
        homeworks = decode_list(unwrap(payload), homework_from_json, "homework")
        return await try_join_all(self._homework_with_detail(h) for h in homeworks)

    async def homework_list(self, course: str) -> List[Homework]:
        """Unsubmitted, then submitted, then graded homework, each in server order."""
        unsubmitted, submitted, graded = await try_join3(
            *(self._homework_sublist(list_url(course)) for list_url in self.urls.homework_lists)
        )
        return unsubmitted + submitted + graded

    async def discussion_list(self, course: str) -> List[Discussion]:
        payload = await self._get_json(self.urls.discussion_list(course))
        return decode_list(unwrap(payload), discussion_from_json, "discussion")

    async def question_list(self, course: str) -> List[Question]:
        payload = await self._get_json(self.urls.question_list(course))
        return decode_list(unwrap(payload), question_from_json, "question")

    async def discussion_replies(self, course: str, discussion: str, board: str) -> List[DiscussionReply]:
        html = await self._get_text(self.urls.discussion_replies(course, discussion, board))
        return parse_discussion_replies(html)

    # -----------------------------------------------------------------------
    # Actions
    # -----------------------------------------------------------------------

    async def submit_homework(
        self,
        student_homework: str,
        content: str,
        file: Optional[Tuple[str, bytes]] = None,
    ) -> None:
        data = {"zynr": content, "xszyid": student_homework, "isDeleted": "0"}
        body = await self._post_form(self.urls.homework_submit, data, file)
        ensure_success(body, "submit homework")

    async def reply_discussion(
        self,
        course: str,
        discussion: str,
        content: str,
        respondent_reply: Optional[str] = None,
        file: Optional[Tuple[str, bytes]] = None,
    ) -> None:
        data = {"wlkcid": course, "tltid": discussion, "nr": content}
        if respondent_reply is not None:
            data["fhhid"] = respondent_reply
            data["_fhhid"] = respondent_reply
        body = await self._post_form(self.urls.reply_discussion, data, file)
        ensure_success(body, "reply discussion")

    async def delete_discussion_reply(self, course: str, reply: str) -> None:
        """
        Delete one of the student's own replies.

        The portal tends to drop the connection instead of answering this
        request, so a timeout is taken as success. Other errors are not.
        """
        url = self.urls.delete_discussion_reply(course, reply)
        try:
            resp = await send(self.client, "POST", url, timeout=self.delete_timeout)
        except NetworkError as exc:
            if isinstance(exc.__cause__, httpx.TimeoutException):
                logger.warning("deleting reply %s timed out, assuming it was deleted", reply)
                return
            raise
        ensure_success(resp.text, "delete discussion reply")
