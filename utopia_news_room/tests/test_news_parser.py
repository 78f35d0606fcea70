import io
import json
import os
import sys
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout

HERE = os.path.dirname(__file__)
ROOT = os.path.abspath(os.path.join(HERE, ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import news_parser

NEWS_HTML = """
<html><body>
<div id="content-area">
  <table>
    <tr><td>July 1 of YR3</td><td>Duke Silverhand (3:12) invaded Baron Ashgrove (6:7) and captured 55 acres of land!</td></tr>
    <tr><td>July 2 of YR3</td><td>Baron Ashgrove (6:7) attempted to invade Duke Silverhand (3:12), but was repelled.</td></tr>
    <tr><td>July 2 of YR3</td><td>Baron Ashgrove (6:7) attempted to invade Duke Silverhand (3:12), but was repelled.</td></tr>
    <tr><td>Month</td><td>Event</td></tr>
  </table>
</div>
<div class="footer"><p>July 9 of YR3 outside the news area</p></div>
</body></html>
"""

TEXT = "\n".join(
    [
        "July 1 of YR3\tDuke Silverhand (3:12) invaded Baron Ashgrove (6:7) and captured 55 acres of land!",
        "July 2 of YR3\tBaron Ashgrove (6:7) attempted to invade Duke Silverhand (3:12), but was repelled.",
    ]
)


class ExtractNewsLinesTests(unittest.TestCase):
    def test_rows_inside_content_area(self):
        lines = news_parser.extract_news_lines(NEWS_HTML)
        self.assertEqual(
            lines,
            [
                "July 1 of YR3 Duke Silverhand (3:12) invaded Baron Ashgrove (6:7) and captured 55 acres of land!",
                "July 2 of YR3 Baron Ashgrove (6:7) attempted to invade Duke Silverhand (3:12), but was repelled.",
            ],
        )

    def test_no_body(self):
        self.assertEqual(news_parser.extract_news_lines(""), [])

    def test_html_report_matches_text_report(self):
        from_html = news_parser.build_report(NEWS_HTML, html=True)
        from_text = news_parser.build_report(TEXT)
        self.assertEqual(from_html, from_text)

    def test_normalize_text(self):
        self.assertEqual(news_parser.normalize_text("  a \t b\n c "), "a b c")


class CliTests(unittest.TestCase):
    def setUp(self):
        handle = tempfile.NamedTemporaryFile("w", suffix=".txt", delete=False, encoding="utf-8")
        handle.write(TEXT)
        handle.close()
        self.path = handle.name
        self.missing_config = os.path.join(tempfile.gettempdir(), "utopia-news-room-missing.json")

    def tearDown(self):
        os.unlink(self.path)

    def run_cli(self, *argv):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = news_parser.main([self.path, "--config", self.missing_config, *argv])
        return code, out.getvalue(), err.getvalue()

    def test_report_on_stdout_log_on_stderr(self):
        code, out, err = self.run_cli()
        self.assertEqual(code, 0)
        self.assertTrue(out.startswith("** Kingdom news report **"))
        self.assertIn("[news] lines=2 records=2", err)
        self.assertNotIn("[news]", out)

    def test_json_output(self):
        _, out, _ = self.run_cli("--json", "--home", "3:12", "--window", "3")
        data = json.loads(out)
        self.assertEqual(data["home_kingdom"], "3:12")
        self.assertEqual(data["window"], 3)

    def test_province_dump(self):
        _, out, err = self.run_cli("--province", "Duke Silverhand", "--kingdom", "3:12")
        rows = json.loads(out)
        self.assertEqual([row["category"] for row in rows], ["Traditional March", "Failed Attack"])
        self.assertIn("records=2", err)

    def test_since_filter(self):
        _, out, _ = self.run_cli("--json", "--since", "July 2 of YR3")
        self.assertEqual(len(json.loads(out)["records"]), 1)

    def test_bad_arguments_exit(self):
        for argv in (["--home", "nope"], ["--window", "0"], ["--since", "Smarch 1 of YR3"]):
            with self.subTest(argv=argv):
                with self.assertRaises(SystemExit):
                    self.run_cli(*argv)


if __name__ == "__main__":
    unittest.main()
