"""
CLI (Command Line Interface).

A small demo of the client: it logs in, runs one query and prints plain text.

    learnhelper semesters
    learnhelper courses [--semester <id>]
    learnhelper notifications <course_id>
    learnhelper files <course_id>
    learnhelper homework <course_id>
    learnhelper discussions <course_id>
    learnhelper questions <course_id>
    learnhelper replies <course_id> <discussion_id> <board_id>

Credentials come from --username / LEARNHELPER_USERNAME and
LEARNHELPER_PASSWORD; whatever is missing is prompted for.
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
from datetime import datetime
from typing import Awaitable, Callable, Dict, Optional, Tuple

from learnhelper.client import LearnHelper
from learnhelper.config import Settings, load_settings
from learnhelper.errors import LearnHelperError
from learnhelper.model import DiscussionReply


def _fmt_time(t: Optional[datetime]) -> str:
    return t.strftime("%Y-%m-%d %H:%M") if t is not None else "-"


def _credentials(args: argparse.Namespace, settings: Settings) -> Tuple[str, str]:
    username = (args.username or settings.username or "").strip()
    if not username:
        username = input("Username: ").strip()
    password = settings.password or getpass.getpass("Password: ")
    return username, password


async def _cmd_semesters(helper: LearnHelper, args: argparse.Namespace) -> None:
    for sid in await helper.semester_id_list():
        print(sid)


async def _cmd_courses(helper: LearnHelper, args: argparse.Namespace) -> None:
    semester = (args.semester or "").strip()
    if not semester:
        semesters = await helper.semester_id_list()
        if not semesters:
            print("No semesters.")
            return
        semester = semesters[0]

    courses = await helper.course_list(semester)
    if not courses:
        print("No courses.")
        return
    for c in courses:
        where = "; ".join(c.time_location)
        print(f"{c.id} | {c.name} | {c.teacher_name} | {where}")


async def _cmd_notifications(helper: LearnHelper, args: argparse.Namespace) -> None:
    for n in await helper.notification_list(args.course_id):
        mark = "*" if n.important else " "
        line = f"{mark} {_fmt_time(n.publish_time)} | {n.title} | {n.publisher}"
        if n.attachment_name:
            line += f" | {n.attachment_name} -> {n.attachment_url or '?'}"
        print(line)


async def _cmd_files(helper: LearnHelper, args: argparse.Namespace) -> None:
    for f in await helper.file_list(args.course_id):
        print(f"{f.id} | {f.title}.{f.file_type} | {f.size} | {_fmt_time(f.upload_time)} | {helper.urls.download_url(f)}")


async def _cmd_homework(helper: LearnHelper, args: argparse.Namespace) -> None:
    for h in await helper.homework_list(args.course_id):
        grade = "-" if h.grade is None else f"{h.grade:g}"
        submitted = "submitted" if h.submit_time is not None else "open"
        print(f"{h.id} | {h.title} | due {_fmt_time(h.deadline)} | {submitted} | grade {grade}")


async def _cmd_discussions(helper: LearnHelper, args: argparse.Namespace) -> None:
    for d in await helper.discussion_list(args.course_id):
        print(f"{d.id} | board {d.board_id} | {d.title} | {d.publisher_name} | replies {d.reply_count}")


async def _cmd_questions(helper: LearnHelper, args: argparse.Namespace) -> None:
    for q in await helper.question_list(args.course_id):
        print(f"{q.id} | {q.title} | {q.publisher_name} | replies {q.reply_count}")


def _print_reply(reply: DiscussionReply, indent: str) -> None:
    rid = reply.id or "(post)"
    print(f"{indent}{rid} | {reply.author} | {_fmt_time(reply.publish_time)}")
    for sub in reply.replies:
        _print_reply(sub, indent + "    ")


async def _cmd_replies(helper: LearnHelper, args: argparse.Namespace) -> None:
    replies = await helper.discussion_replies(args.course_id, args.discussion_id, args.board_id)
    if not replies:
        print("No replies.")
        return
    for r in replies:
        _print_reply(r, "")


COMMANDS: Dict[str, Callable[[LearnHelper, argparse.Namespace], Awaitable[None]]] = {
    "semesters": _cmd_semesters,
    "courses": _cmd_courses,
    "notifications": _cmd_notifications,
    "files": _cmd_files,
    "homework": _cmd_homework,
    "discussions": _cmd_discussions,
    "questions": _cmd_questions,
    "replies": _cmd_replies,
}


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    username, password = _credentials(args, settings)
    helper = await LearnHelper.login(username, password, settings=settings)
    async with helper:
        await COMMANDS[args.command](helper, args)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="learnhelper", description="Course portal client (demo)")
    parser.add_argument("--username", "-u", type=str, default=None, help="Login name")
    parser.add_argument("--verbose", "-v", action="count", default=0, help="-v: info, -vv: debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("semesters", help="List semester ids")

    p_courses = sub.add_parser("courses", help="List courses of a semester")
    p_courses.add_argument("--semester", "-s", type=str, default=None, help="Semester id (default: current)")

    for name, help_text in (
        ("notifications", "List notifications of a course"),
        ("files", "List files of a course"),
        ("homework", "List homework of a course"),
        ("discussions", "List discussions of a course"),
        ("questions", "List questions of a course"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("course_id", type=str, help="Course id")

    p_replies = sub.add_parser("replies", help="Show the reply tree of a discussion")
    p_replies.add_argument("course_id", type=str, help="Course id")
    p_replies.add_argument("discussion_id", type=str, help="Discussion id")
    p_replies.add_argument("board_id", type=str, help="Discussion board id")

    return parser


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, runs the command
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    try:
        settings = load_settings()
    except ValueError as exc:
        print(f"Error: {exc}")
        raise SystemExit(1)

    try:
        raise SystemExit(asyncio.run(_run(args, settings)))
    except LearnHelperError as exc:
        print(f"Error: {exc}")
        raise SystemExit(1)
