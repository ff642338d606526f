import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from learnhelper.config import DEFAULT_DELETE_TIMEOUT, DEFAULT_LEARN_HOST, load_settings
from learnhelper.model import Course, File, Homework
from learnhelper.urls import PortalUrls


class TestSettings(unittest.TestCase):
    def test_defaults(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            settings = load_settings(Path(tempfile.gettempdir()) / "learnhelper-missing.env")
        self.assertEqual(settings.learn_host, DEFAULT_LEARN_HOST)
        self.assertEqual(settings.delete_timeout, DEFAULT_DELETE_TIMEOUT)
        self.assertIsNone(settings.username)

    def test_env_file_and_environment(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            env_file = Path(d) / ".env"
            env_file.write_text(
                "LEARNHELPER_LEARN_HOST=https://learn.example/\nLEARNHELPER_DELETE_TIMEOUT=2.5\n",
                encoding="utf-8",
            )
            # already-set variables win over the file
            with mock.patch.dict(os.environ, {"LEARNHELPER_DELETE_TIMEOUT": "9"}, clear=True):
                settings = load_settings(env_file)

        self.assertEqual(settings.learn_host, "https://learn.example")
        self.assertEqual(settings.delete_timeout, 9.0)

    def test_bad_timeout(self) -> None:
        with mock.patch.dict(os.environ, {"LEARNHELPER_DELETE_TIMEOUT": "soon"}, clear=True):
            with self.assertRaises(ValueError):
                load_settings(Path(tempfile.gettempdir()) / "learnhelper-missing.env")


class TestPortalUrls(unittest.TestCase):
    def test_record_pages(self) -> None:
        urls = PortalUrls(learn_host="https://learn.test", id_host="https://id.test")
        course = Course("c1", "n", "e", "t", "1", "2", 0)
        file = File("f1", "t", "", 1, "1B", None, False, False, 0, 0, "pdf")
        homework = Homework("c1", "h1", "s1", "t", None, None)

        self.assertEqual(urls.course_url(course), "https://learn.test/f/wlxt/index/course/student/course?wlkcid=c1")
        self.assertTrue(urls.download_url(file).endswith("downloadFile?sfgk=0&wjid=f1"))
        self.assertEqual(
            urls.homework_url(homework),
            "https://learn.test/f/wlxt/kczy/zy/student/viewCj?wlkcid=c1&zyid=h1&xszyid=s1",
        )
        self.assertEqual(
            urls.homework_submit_url(homework),
            "https://learn.test/f/wlxt/kczy/zy/student/tijiao?wlkcid=c1&xszyid=s1",
        )
        self.assertTrue(urls.login.startswith("https://id.test/"))

    def test_homework_lists_order(self) -> None:
        urls = PortalUrls()
        self.assertEqual(
            [f("c1").split("/")[-1].split("?")[0] for f in urls.homework_lists],
            ["zyListWj", "zyListYjwg", "zyListYpg"],
        )


if __name__ == "__main__":
    unittest.main()
