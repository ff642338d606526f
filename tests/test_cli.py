"""
Tests for the CLI entry point.

These tests focus on:
- Basic argument validation (a sub-command is required)
- Library errors become exit code 1 instead of a traceback
- A command prints one line per record

The client is replaced with mocks, nothing talks to the network.
"""

import io
import unittest
from contextlib import redirect_stdout
from datetime import datetime
from unittest import mock

from learnhelper.cli import main
from learnhelper.client import LearnHelper
from learnhelper.config import Settings
from learnhelper.errors import TicketNotFoundError
from learnhelper.model import DiscussionReply

SETTINGS = Settings(username="2020010001", password="secret")


def _fake_helper() -> mock.MagicMock:
    helper = mock.MagicMock()
    helper.semester_id_list = mock.AsyncMock(return_value=["2023-2024-2", "2023-2024-1"])
    helper.discussion_replies = mock.AsyncMock(
        return_value=[
            DiscussionReply(
                id=None,
                author="Alice",
                publish_time=datetime(2023, 3, 1, 8, 0),
                content="hi",
                replies=(DiscussionReply(id="7", author="Bob", publish_time=datetime(2023, 3, 1, 9, 0), content="ok"),),
            )
        ]
    )
    return helper


class TestCLI(unittest.TestCase):
    def test_command_is_required(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            main([])
        self.assertNotEqual(ctx.exception.code, 0)

    def test_login_error_exits_with_1(self) -> None:
        login = mock.AsyncMock(side_effect=TicketNotFoundError())
        out = io.StringIO()
        with mock.patch("learnhelper.cli.load_settings", return_value=SETTINGS), mock.patch.object(
            LearnHelper, "login", login
        ), redirect_stdout(out):
            with self.assertRaises(SystemExit) as ctx:
                main(["semesters"])

        self.assertEqual(ctx.exception.code, 1)
        self.assertIn("no ticket", out.getvalue())
        login.assert_awaited_once_with("2020010001", "secret", settings=SETTINGS)

    def test_bad_settings_exit_with_1(self) -> None:
        out = io.StringIO()
        with mock.patch(
            "learnhelper.cli.load_settings", side_effect=ValueError("could not convert string to float: 'soon'")
        ), redirect_stdout(out):
            with self.assertRaises(SystemExit) as ctx:
                main(["semesters"])

        self.assertEqual(ctx.exception.code, 1)
        self.assertIn("Error: could not convert", out.getvalue())

    def test_semesters(self) -> None:
        helper = _fake_helper()
        out = io.StringIO()
        with mock.patch("learnhelper.cli.load_settings", return_value=SETTINGS), mock.patch.object(
            LearnHelper, "login", mock.AsyncMock(return_value=helper)
        ), redirect_stdout(out):
            with self.assertRaises(SystemExit) as ctx:
                main(["semesters"])

        self.assertEqual(ctx.exception.code, 0)
        self.assertEqual(out.getvalue().splitlines(), ["2023-2024-2", "2023-2024-1"])

    def test_replies_are_indented(self) -> None:
        helper = _fake_helper()
        out = io.StringIO()
        with mock.patch("learnhelper.cli.load_settings", return_value=SETTINGS), mock.patch.object(
            LearnHelper, "login", mock.AsyncMock(return_value=helper)
        ), redirect_stdout(out):
            with self.assertRaises(SystemExit):
                main(["replies", "c1", "d1", "b1"])

        lines = out.getvalue().splitlines()
        self.assertEqual(lines[0], "(post) | Alice | 2023-03-01 08:00")
        self.assertEqual(lines[1], "    7 | Bob | 2023-03-01 09:00")
        helper.discussion_replies.assert_awaited_once_with("c1", "d1", "b1")


if __name__ == "__main__":
    unittest.main()
