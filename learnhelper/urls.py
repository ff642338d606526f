"""
URL table for the portal endpoints.

All URLs are pure functions of the two configured hosts: the identity host
(login only) and the learning host (everything else).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Tuple

from learnhelper.config import DEFAULT_ID_HOST, DEFAULT_LEARN_HOST, Settings
from learnhelper.model import Course, File, Homework, Notification


@dataclass(frozen=True)
class PortalUrls:
    learn_host: str = DEFAULT_LEARN_HOST
    id_host: str = DEFAULT_ID_HOST

    @classmethod
    def from_settings(cls, settings: Settings) -> "PortalUrls":
        return cls(learn_host=settings.learn_host, id_host=settings.id_host)

    # Prefix for scraped download links (they are host-relative).
    @property
    def prefix(self) -> str:
        return self.learn_host

    # -----------------------------------------------------------------------
    # Session
    # -----------------------------------------------------------------------

    @property
    def login(self) -> str:
        return f"{self.id_host}/do/off/ui/auth/login/post/bb5df85216504820be7bba2b0ae1535b/0?/login.do"

    def auth_roam(self, ticket: str) -> str:
        return f"{self.learn_host}/b/j_spring_security_thauth_roaming_entry?ticket={ticket}"

    @property
    def logout(self) -> str:
        return f"{self.learn_host}/f/j_spring_security_logout"

    # -----------------------------------------------------------------------
    # Lists and details
    # -----------------------------------------------------------------------

    @property
    def semester_list(self) -> str:
        return f"{self.learn_host}/b/wlxt/kc/v_wlkc_xs_xktjb_coassb/queryxnxq"

    def course_list(self, semester: str) -> str:
        return f"{self.learn_host}/b/wlxt/kc/v_wlkc_xs_xkb_kcb_extend/student/loadCourseBySemesterId/{semester}"

    def course_time_location(self, course: str) -> str:
        return f"{self.learn_host}/b/kc/v_wlkc_xk_sjddb/detail?id={course}"

    def course_page(self, course: str) -> str:
        return f"{self.learn_host}/f/wlxt/index/course/student/course?wlkcid={course}"

    def notification_list(self, course: str) -> str:
        return f"{self.learn_host}/b/wlxt/kcgg/wlkc_ggb/student/kcggListXs?wlkcid={course}&size=1000"

    def notification_detail(self, notification: str, course: str) -> str:
        return f"{self.learn_host}/f/wlxt/kcgg/wlkc_ggb/student/beforeViewXs?wlkcid={course}&id={notification}"

    def file_list(self, course: str) -> str:
        return f"{self.learn_host}/b/wlxt/kj/wlkc_kjxxb/student/kjxxbByWlkcidAndSizeForStudent?wlkcid={course}&size=1000"

    def file_download(self, file: str) -> str:
        return f"{self.learn_host}/b/wlxt/kj/wlkc_kjxxb/student/downloadFile?sfgk=0&wjid={file}"

    def homework_list_unsubmitted(self, course: str) -> str:
        return f"{self.learn_host}/b/wlxt/kczy/zy/student/index/zyListWj?wlkcid={course}&size=1000"

    def homework_list_submitted(self, course: str) -> str:
        return f"{self.learn_host}/b/wlxt/kczy/zy/student/index/zyListYjwg?wlkcid={course}&size=1000"

    def homework_list_graded(self, course: str) -> str:
        return f"{self.learn_host}/b/wlxt/kczy/zy/student/index/zyListYpg?wlkcid={course}&size=1000"

    @property
    def homework_lists(self) -> Tuple[Callable[[str], str], Callable[[str], str], Callable[[str], str]]:
        """The three homework-list endpoints, in the order their results are concatenated."""
        return (self.homework_list_unsubmitted, self.homework_list_submitted, self.homework_list_graded)

    def homework_detail(self, course: str, homework: str, student_homework: str) -> str:
        return (
            f"{self.learn_host}/f/wlxt/kczy/zy/student/viewCj"
            f"?wlkcid={course}&zyid={homework}&xszyid={student_homework}"
        )

    def homework_submit_page(self, course: str, student_homework: str) -> str:
        return f"{self.learn_host}/f/wlxt/kczy/zy/student/tijiao?wlkcid={course}&xszyid={student_homework}"

    @property
    def homework_submit(self) -> str:
        return f"{self.learn_host}/b/wlxt/kczy/zy/student/tjzy"

    def discussion_list(self, course: str) -> str:
        return f"{self.learn_host}/b/wlxt/bbs/bbs_tltb/student/kctlList?wlkcid={course}&size=1000"

    def question_list(self, course: str) -> str:
        return f"{self.learn_host}/b/wlxt/bbs/bbs_tltb/student/kcdyList?wlkcid={course}&size=1000"

    def discussion_replies(self, course: str, discussion: str, board: str) -> str:
        return (
            f"{self.learn_host}/f/wlxt/bbs/bbs_tltb/student/viewTlById"
            f"?wlkcid={course}&id={discussion}&tabbh=2&bqid={board}"
        )

    @property
    def reply_discussion(self) -> str:
        return f"{self.learn_host}/b/wlxt/bbs/bbs_kcft/student/supplement"

    def delete_discussion_reply(self, course: str, reply: str) -> str:
        return f"{self.learn_host}/b/wlxt/bbs/bbs_kcft/student/delete?wlkcid={course}&id={reply}"

    # -----------------------------------------------------------------------
    # Record pages
    # -----------------------------------------------------------------------

    def course_url(self, course: Course) -> str:
        return self.course_page(course.id)

    def notification_url(self, notification: Notification) -> str:
        return self.notification_detail(notification.id, notification.course_id)

    def download_url(self, file: File) -> str:
        return self.file_download(file.id)

    def homework_url(self, homework: Homework) -> str:
        return self.homework_detail(homework.course_id, homework.id, homework.student_homework_id)

    def homework_submit_url(self, homework: Homework) -> str:
        return self.homework_submit_page(homework.course_id, homework.student_homework_id)
