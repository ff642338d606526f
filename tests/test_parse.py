import unittest
from datetime import datetime

from learnhelper.errors import DomainFailure, ParseError
from learnhelper.model import Attachment
from learnhelper.parse import (
    ensure_success,
    parse_discussion_replies,
    parse_homework_detail,
    parse_notification_attachment,
)

PREFIX = "https://learn.test"


def _section(html: str) -> str:
    return f'<div class="list calendar clearfix"><div class="fl right"><div class="c55">{html}</div></div></div>'


def _block(inner: str) -> str:
    return f'<div class="list fujian clearfix"><div class="fl">{inner}</div></div>'


ASSIGNMENT = _block('<a href="/b/wlxt/kj/x?downloadUrl=XYZ"><span>name.pdf</span></a>')
SUBMISSION = _block('<a href="/b/wlxt/kj/x?downloadUrl=/sub/1">mine.zip</a>')
GRADE = _block('<a href="/b/wlxt/kj/x?downloadUrl=/grade/1">comments.docx</a>')


REPLIES = """
<div class="reply-list">
  <div class="reply-item">
    <span class="reply-author">Alice</span>
    <span class="reply-time">2023-03-01 08:00</span>
    <div class="reply-content"><p>Opening post</p></div>
    <div class="sub-replies">
      <div class="reply-item" data-id="456">
        <span class="reply-author">Bob</span>
        <span class="reply-time">2023-03-01 09:15:30</span>
        <div class="reply-content">Agreed</div>
      </div>
    </div>
  </div>
  <div class="reply-item" data-id="123">
    <span class="reply-author">Carol</span>
    <span class="reply-time">2023-03-02 10:00</span>
    <div class="reply-content">Second</div>
    <div class="sub-replies"></div>
  </div>
</div>
"""


class TestHomeworkDetail(unittest.TestCase):
    def test_all_sections_and_attachments(self) -> None:
        html = _section("<p>Do it</p>") + _section("answer") + _section("my text") + ASSIGNMENT + SUBMISSION + GRADE
        detail = parse_homework_detail(html, PREFIX)

        self.assertEqual(detail.description, "<p>Do it</p>")
        self.assertEqual(detail.answer, "answer")
        self.assertEqual(detail.submission, "my text")
        self.assertEqual(detail.attachment, Attachment("name.pdf", PREFIX + "XYZ"))
        self.assertEqual(detail.submit_attachment, Attachment("mine.zip", PREFIX + "/sub/1"))
        self.assertEqual(detail.grade_attachment, Attachment("comments.docx", PREFIX + "/grade/1"))

    def test_missing_blocks_are_none(self) -> None:
        detail = parse_homework_detail(_section("only text") + ASSIGNMENT, PREFIX)

        self.assertEqual(detail.answer, "")
        self.assertIsNotNone(detail.attachment)
        self.assertIsNone(detail.submit_attachment)
        self.assertIsNone(detail.grade_attachment)

    def test_block_without_download_link_is_none(self) -> None:
        html = _section("x") + _block('<a href="/b/preview?id=1">name.pdf</a>') + SUBMISSION
        detail = parse_homework_detail(html, PREFIX)

        # positions are kept: a bad first block does not shift the others
        self.assertIsNone(detail.attachment)
        self.assertEqual(detail.submit_attachment, Attachment("mine.zip", PREFIX + "/sub/1"))

    def test_indented_anchor_markup(self) -> None:
        html = _section("x") + _block('<a href="/b/x?downloadUrl=XYZ">\n  <span>name.pdf</span>\n</a>')
        self.assertEqual(parse_homework_detail(html, PREFIX).attachment, Attachment("name.pdf", PREFIX + "XYZ"))

    def test_anchor_without_text_is_none(self) -> None:
        html = _section("x") + _block('<a href="/b/x?downloadUrl=XYZ"></a>')
        self.assertIsNone(parse_homework_detail(html, PREFIX).attachment)

    def test_missing_description_is_an_error(self) -> None:
        with self.assertRaises(ParseError):
            parse_homework_detail(ASSIGNMENT, PREFIX)


class TestNotificationAttachment(unittest.TestCase):
    def test_relative_link(self) -> None:
        html = '<div><a class="ml-10" href="/b/wlxt/kj/download?id=9">a.pdf</a></div>'
        self.assertEqual(parse_notification_attachment(html, PREFIX), PREFIX + "/b/wlxt/kj/download?id=9")

    def test_absolute_link_kept(self) -> None:
        html = '<a class="ml-10" href="https://files.test/a.pdf">a.pdf</a>'
        self.assertEqual(parse_notification_attachment(html, PREFIX), "https://files.test/a.pdf")

    def test_no_link(self) -> None:
        self.assertIsNone(parse_notification_attachment("<p>nothing here</p>", PREFIX))


class TestDiscussionReplies(unittest.TestCase):
    def test_two_level_tree(self) -> None:
        replies = parse_discussion_replies(REPLIES)

        self.assertEqual(len(replies), 2)
        first, second = replies

        self.assertIsNone(first.id)
        self.assertEqual(first.author, "Alice")
        self.assertEqual(first.publish_time, datetime(2023, 3, 1, 8, 0))
        self.assertEqual(first.content, "<p>Opening post</p>")
        self.assertEqual(len(first.replies), 1)

        sub = first.replies[0]
        self.assertEqual(sub.id, "456")
        self.assertEqual(sub.author, "Bob")
        self.assertEqual(sub.publish_time, datetime(2023, 3, 1, 9, 15, 30))
        self.assertEqual(sub.replies, ())

        self.assertEqual(second.id, "123")
        self.assertEqual(second.author, "Carol")
        self.assertEqual(second.replies, ())

    def test_third_level_is_ignored(self) -> None:
        html = REPLIES.replace(
            '<div class="reply-content">Agreed</div>',
            '<div class="reply-content">Agreed</div>'
            '<div class="sub-replies"><div class="reply-item" data-id="789">'
            '<span class="reply-author">Dan</span><span class="reply-time">2023-03-01 10:00</span>'
            '<div class="reply-content">too deep</div></div></div>',
        )
        first, second = parse_discussion_replies(html)

        self.assertEqual([r.id for r in first.replies], ["456"])
        self.assertEqual(first.replies[0].replies, ())
        self.assertEqual(first.replies[0].content, "Agreed")

    def test_replies_are_hashable(self) -> None:
        first, _ = parse_discussion_replies(REPLIES)
        self.assertEqual(hash(first), hash(parse_discussion_replies(REPLIES)[0]))

    def test_empty_list(self) -> None:
        self.assertEqual(parse_discussion_replies('<div class="reply-list"></div>'), [])

    def test_missing_container(self) -> None:
        with self.assertRaises(ParseError):
            parse_discussion_replies("<div class='other'></div>")

    def test_bad_time(self) -> None:
        html = REPLIES.replace("2023-03-02 10:00", "yesterday")
        with self.assertRaises(ParseError):
            parse_discussion_replies(html)


class TestEnsureSuccess(unittest.TestCase):
    def test_marker_present(self) -> None:
        ensure_success('{"result":"success","msg":""}', "submit homework")

    def test_marker_missing(self) -> None:
        with self.assertRaises(DomainFailure) as ctx:
            ensure_success("failed", "submit homework")
        self.assertEqual(ctx.exception.action, "submit homework")
        self.assertEqual(ctx.exception.body, "failed")


if __name__ == "__main__":
    unittest.main()
