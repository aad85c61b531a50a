# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from dacite import Config, DaciteError, from_dict

logger = logging.getLogger(__name__)

AI_ANALYSIS_UNAVAILABLE = "AI analysis not available or skipped."
NOT_AVAILABLE = "N/A"

PHONE_NUMBER_PATTERN = re.compile(r"^\+\d+\s?\d[\d\s-]{5,}$")


class AnalysisResultsError(ValueError):
    """Raised when a stored analysis payload cannot be decoded at all."""


@dataclass
class Champion:
    user: Optional[str] = None
    count: int = 0


@dataclass
class MonthlyPoint:
    x: str
    y: float


@dataclass
class MonthlySeries:
    id: str
    data: List[MonthlyPoint] = field(default_factory=list)


@dataclass
class WeekdayVsWeekend:
    average_weekday_messages: float = 0
    average_weekend_messages: float = 0
    difference: float = 0
    percentage_difference: float = 0


@dataclass
class Stats:
    total_messages: int = 0
    days_active: Optional[int] = None
    user_message_count: Dict[str, int] = field(default_factory=dict)
    most_active_users_pct: Dict[str, float] = field(default_factory=dict)
    conversation_starters_pct: Dict[str, float] = field(default_factory=dict)
    most_ignored_users_pct: Dict[str, float] = field(default_factory=dict)
    first_text_champion: Champion = field(default_factory=Champion)
    longest_monologue: Champion = field(default_factory=Champion)
    common_words: Dict[str, int] = field(default_factory=dict)
    common_emojis: Dict[str, int] = field(default_factory=dict)
    average_response_time_minutes: float = 0
    peak_hour: Optional[int] = None
    user_monthly_activity: List[MonthlySeries] = field(default_factory=list)
    weekday_vs_weekend_avg: WeekdayVsWeekend = field(default_factory=WeekdayVsWeekend)
    # First row and first column hold user names.
    user_interaction_matrix: Optional[List[List[Union[str, int, float, None]]]] = None


@dataclass
class PersonAnalysis:
    name: str
    animal: str = ""
    description: str = ""
    fun_lines: Optional[List[str]] = None


@dataclass
class AiAnalysisData:
    summary: str
    people: List[PersonAnalysis] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class AnalysisResults:
    stats: Stats
    ai_analysis: AiAnalysisData
    chat_name: Optional[str] = None
    processing_time_seconds: Optional[float] = None
    error: Optional[str] = None


def _normalize_ai_analysis(value: Any) -> Dict[str, Any]:
    """
    The backend sometimes sends ai_analysis as a JSON-encoded string, or
    leaves it out. Always return a dict with a summary and a people list.
    """
    if not value:
        return {"summary": AI_ANALYSIS_UNAVAILABLE, "people": []}

    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except ValueError:
            logger.warning("Failed to parse AI analysis from string")
            return {"summary": value, "people": []}
        if isinstance(decoded, dict) and "summary" in decoded:
            return {
                "summary": decoded["summary"],
                "people": decoded.get("people") or [],
                "error": decoded.get("error"),
            }
        return {"summary": value, "people": []}

    if not isinstance(value, dict):
        logger.warning("Ignoring AI analysis of type %s", type(value).__name__)
        return {"summary": AI_ANALYSIS_UNAVAILABLE, "people": []}

    normalized = dict(value)
    if not normalized.get("people"):
        normalized["people"] = []
    normalized.setdefault("summary", "")
    return normalized


def parse_analysis_results(raw: Union[str, bytes, Dict[str, Any]]) -> AnalysisResults:
    """Build AnalysisResults from a stored blob or an already-decoded dict."""
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            raise AnalysisResultsError(
                "Could not load analysis results. Data might be corrupted."
            ) from e
    if not isinstance(raw, dict):
        raise AnalysisResultsError("Analysis results must be a JSON object.")

    data = dict(raw)
    data["stats"] = data.get("stats") or {}
    data["ai_analysis"] = _normalize_ai_analysis(data.get("ai_analysis"))
    try:
        return from_dict(
            data_class=AnalysisResults, data=data, config=Config(check_types=False)
        )
    except DaciteError as e:
        raise AnalysisResultsError(f"Analysis results are incomplete: {e}") from e


def is_phone_number(value: str) -> bool:
    return bool(PHONE_NUMBER_PATTERN.match(value or ""))


def _display_name(user: str) -> str:
    return user if is_phone_number(user) else user.split(" ")[0]


def format_peak_hour(hour: Optional[int]) -> str:
    if hour is None:
        return NOT_AVAILABLE
    hour = int(hour)
    if hour < 0 or hour > 23:
        return NOT_AVAILABLE
    suffix = "PM" if hour >= 12 else "AM"
    display_hour = 12 if hour % 12 == 0 else hour % 12
    return f"{display_hour} {suffix}"


def format_first_text_champion(champion: Optional[Champion]) -> str:
    if not champion or not champion.user:
        return NOT_AVAILABLE
    return f"{_display_name(champion.user)} ({champion.count} times)"


def format_most_ignored(ignored: Optional[Dict[str, float]]) -> str:
    if not ignored:
        return NOT_AVAILABLE
    user, percentage = max(ignored.items(), key=lambda item: item[1])
    return f"{_display_name(user)} ({percentage:.1f}%)"


def top_words(common_words: Dict[str, int], limit: int = 6) -> List[Dict[str, Any]]:
    ranked = sorted(common_words.items(), key=lambda item: item[1], reverse=True)
    return [{"text": word.upper(), "value": count} for word, count in ranked[:limit]]


def filter_phone_numbers(values: Dict[str, float]) -> Dict[str, float]:
    return {user: value for user, value in values.items() if not is_phone_number(user)}


def filter_monthly_activity(series: List[MonthlySeries]) -> List[MonthlySeries]:
    return [item for item in series or [] if not is_phone_number(item.id)]


def filter_interaction_matrix(
    matrix: Optional[List[List[Any]]], keys: List[str]
) -> tuple:
    """
    Drop phone-number users from the interaction matrix. Returns the numeric
    matrix (header row and column removed) and the remaining keys.
    """
    if not matrix or len(matrix) <= 1 or not keys:
        return [], []

    valid = [index for index, key in enumerate(keys) if not is_phone_number(key)]
    filtered_keys = [keys[index] for index in valid]
    body = matrix[1:]
    filtered = [
        [
            value if isinstance(value, (int, float)) and not isinstance(value, bool) else 0
            for col, value in enumerate(body[row][1:])
            if col in valid
        ]
        for row in valid
        if row < len(body)
    ]
    return filtered, filtered_keys
