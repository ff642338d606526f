"""
Blocking portal client.

Same operations as learnhelper.client.LearnHelper, on a requests.Session.
Secondary requests run one after another instead of concurrently; the first
failure still ends the operation.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, List, Optional, Tuple

import requests

from learnhelper.auth import sign_in_blocking, sign_out_blocking
from learnhelper.client import decode_list, time_location
from learnhelper.config import Settings, load_settings
from learnhelper.decode import (
    course_from_json,
    discussion_from_json,
    file_from_json,
    homework_from_json,
    load_json,
    notification_from_json,
    question_from_json,
    semester_ids,
    unwrap,
)
from learnhelper.errors import LearnHelperError, NetworkError, SessionClosedError
from learnhelper.model import Course, Discussion, DiscussionReply, File, Homework, Notification, Question
from learnhelper.parse import (
    ensure_success,
    parse_discussion_replies,
    parse_homework_detail,
    parse_notification_attachment,
)
from learnhelper.transport import build_session, send_blocking, upload_part
from learnhelper.urls import PortalUrls

logger = logging.getLogger(__name__)


class LearnHelper:
    def __init__(self, session: requests.Session, urls: PortalUrls, delete_timeout: float) -> None:
        self._session = session
        self.urls = urls
        self.delete_timeout = delete_timeout
        self._closed = False

    @classmethod
    def login(
        cls,
        username: str,
        password: str,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
    ) -> "LearnHelper":
        settings = settings if settings is not None else load_settings()
        urls = PortalUrls.from_settings(settings)
        owns_session = session is None
        if session is None:
            session = build_session(settings.user_agent)

        try:
            sign_in_blocking(session, urls, username, password)
        except LearnHelperError:
            if owns_session:
                session.close()
            raise

        return cls(session, urls, settings.delete_timeout)

    def logout(self) -> None:
        session = self.session
        self._closed = True
        try:
            sign_out_blocking(session, self.urls)
        finally:
            session.close()

    def __enter__(self) -> "LearnHelper":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        if not self._closed:
            self.logout()

    @property
    def session(self) -> requests.Session:
        if self._closed:
            raise SessionClosedError()
        return self._session

    def _get_text(self, url: str) -> str:
        return send_blocking(self.session, "GET", url).text

    def _get_json(self, url: str) -> Any:
        return load_json(self._get_text(url))

    def _post_form(self, url: str, data: dict, file: Optional[Tuple[str, bytes]]) -> str:
        return send_blocking(self.session, "POST", url, data=data, files=upload_part(file)).text

    # -----------------------------------------------------------------------
    # Lists
    # -----------------------------------------------------------------------

    def semester_id_list(self) -> List[str]:
        return semester_ids(self._get_json(self.urls.semester_list))

    def course_list(self, semester: str) -> List[Course]:
        payload = self._get_json(self.urls.course_list(semester))
        courses = decode_list(unwrap(payload), course_from_json, "course")
        return [
            replace(c, time_location=time_location(self._get_json(self.urls.course_time_location(c.id))))
            for c in courses
        ]

    def notification_list(self, course: str) -> List[Notification]:
        payload = self._get_json(self.urls.notification_list(course))
        out: List[Notification] = []
        for n in decode_list(unwrap(payload), notification_from_json, "notification"):
            if n.attachment_name is not None:
                html = self._get_text(self.urls.notification_url(n))
                n = replace(n, attachment_url=parse_notification_attachment(html, self.urls.prefix))
            out.append(n)
        return out

    def file_list(self, course: str) -> List[File]:
        payload = self._get_json(self.urls.file_list(course))
        return decode_list(unwrap(payload), file_from_json, "file")

    def homework_list(self, course: str) -> List[Homework]:
        out: List[Homework] = []
        for list_url in self.urls.homework_lists:
            payload = self._get_json(list_url(course))
            for h in decode_list(unwrap(payload), homework_from_json, "homework"):
                html = self._get_text(self.urls.homework_url(h))
                out.append(replace(h, detail=parse_homework_detail(html, self.urls.prefix)))
        return out

    def discussion_list(self, course: str) -> List[Discussion]:
        payload = self._get_json(self.urls.discussion_list(course))
        return decode_list(unwrap(payload), discussion_from_json, "discussion")

    def question_list(self, course: str) -> List[Question]:
        payload = self._get_json(self.urls.question_list(course))
        return decode_list(unwrap(payload), question_from_json, "question")

    def discussion_replies(self, course: str, discussion: str, board: str) -> List[DiscussionReply]:
        return parse_discussion_replies(self._get_text(self.urls.discussion_replies(course, discussion, board)))

    # -----------------------------------------------------------------------
    # Actions
    # -----------------------------------------------------------------------

    def submit_homework(self, student_homework: str, content: str, file: Optional[Tuple[str, bytes]] = None) -> None:
        data = {"zynr": content, "xszyid": student_homework, "isDeleted": "0"}
        ensure_success(self._post_form(self.urls.homework_submit, data, file), "submit homework")

    def reply_discussion(
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
        ensure_success(self._post_form(self.urls.reply_discussion, data, file), "reply discussion")

    def delete_discussion_reply(self, course: str, reply: str) -> None:
        # A timeout counts as success, see client.LearnHelper.delete_discussion_reply.
        url = self.urls.delete_discussion_reply(course, reply)
        try:
            resp = send_blocking(self.session, "POST", url, timeout=self.delete_timeout)
        except NetworkError as exc:
            if isinstance(exc.__cause__, requests.Timeout):
                logger.warning("deleting reply %s timed out, assuming it was deleted", reply)
                return
            raise
        ensure_success(resp.text, "delete discussion reply")
