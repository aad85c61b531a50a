"""
Print the headline figures of a saved analysis payload, as the results page
shows them.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from shared.analysis_results import (
    AnalysisResults,
    AnalysisResultsError,
    filter_phone_numbers,
    format_first_text_champion,
    format_most_ignored,
    format_peak_hour,
    parse_analysis_results,
    top_words,
)

logger = logging.getLogger(__name__)


def summarize(results: AnalysisResults) -> list[str]:
    stats = results.stats
    lines = [
        f"Chat: {results.chat_name or 'Unnamed chat'}",
        f"Total messages: {stats.total_messages}",
        f"Days active: {stats.days_active if stats.days_active is not None else 'N/A'}",
        f"Peak hour: {format_peak_hour(stats.peak_hour)}",
        f"First text champion: {format_first_text_champion(stats.first_text_champion)}",
        f"Most ignored: {format_most_ignored(stats.most_ignored_users_pct)}",
        f"Average response time: {stats.average_response_time_minutes:.1f} min",
    ]

    senders = filter_phone_numbers(stats.user_message_count)
    if senders:
        ranked = sorted(senders.items(), key=lambda item: item[1], reverse=True)
        lines.append(
            "Top senders: " + ", ".join(f"{user} ({count})" for user, count in ranked[:3])
        )
    words = top_words(stats.common_words)
    if words:
        lines.append("Top words: " + ", ".join(word["text"] for word in words))

    lines.append(f"AI summary: {results.ai_analysis.summary}")
    for person in results.ai_analysis.people:
        lines.append(f"  {person.name}: {person.animal} - {person.description}")
    return lines


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Summarize an analysis payload")
    parser.add_argument("path", type=Path, help="JSON file saved from /api/upload")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")
    try:
        results = parse_analysis_results(args.path.read_text(encoding="utf-8"))
    except (OSError, AnalysisResultsError) as e:
        logger.error("Could not read %s: %s", args.path, e)
        return 1

    for line in summarize(results):
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
