import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from gateway.config import Settings
from scripts import probe_backends, summarize_results
from shared.analysis_results import parse_analysis_results


class SummarizeResultsTests(unittest.TestCase):
    def test_summary_lines(self):
        results = parse_analysis_results(
            {
                "chat_name": "Family",
                "stats": {
                    "total_messages": 10,
                    "peak_hour": 13,
                    "user_message_count": {"Alice": 6, "+44 7700 900123": 4},
                },
                "ai_analysis": json.dumps({"summary": "Warm.", "people": []}),
            }
        )
        lines = summarize_results.summarize(results)

        self.assertIn("Chat: Family", lines)
        self.assertIn("Peak hour: 1 PM", lines)
        self.assertIn("Top senders: Alice (6)", lines)
        self.assertIn("AI summary: Warm.", lines)

    def test_main_reports_corrupted_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "results.json"
            path.write_text("{oops", encoding="utf-8")
            self.assertEqual(summarize_results.main([str(path)]), 1)

    def test_main_handles_imperfect_profiles(self):
        partial = {"summary": "s", "people": [{"name": "A", "description": "d"}]}
        unnamed = {"summary": "s", "people": [{"animal": "Owl"}]}
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "results.json"
            path.write_text(
                json.dumps({"stats": {}, "ai_analysis": partial}), encoding="utf-8"
            )
            self.assertEqual(summarize_results.main([str(path)]), 0)

            path.write_text(
                json.dumps({"stats": {}, "ai_analysis": unnamed}), encoding="utf-8"
            )
            self.assertEqual(summarize_results.main([str(path)]), 1)


class ProbeBackendsTests(unittest.TestCase):
    @patch("scripts.probe_backends.get_settings")
    def test_command_line_overrides(self, mock_settings):
        mock_settings.return_value = Settings(
            _env_file=None, backend_url_1="http://one.test", val_api_key="k"
        )
        config = probe_backends.build_config(["http://x.test/", "http://y.test"], 1.5)

        self.assertEqual(config.backends, ("http://x.test", "http://y.test"))
        self.assertEqual(config.health_timeout, 1.5)
        self.assertEqual(config.api_key, "k")


if __name__ == "__main__":
    unittest.main()
