"""
Threshold extraction for SQL smart search

Pulls numeric metric bounds out of free text ("5초 이상", "버퍼 10000 이상",
"100번 이상 실행") and normalizes units to the engine's base units:
elapsed time in milliseconds, everything else as plain counts.
"""

from typing import Dict, Union

import structlog

from smartsearch.search.rules import AT_LEAST, AT_MOST, NUMBER, PatternRule, first_match_per_field, rule

logger = structlog.get_logger(__name__)

SECONDS = 1000
MINUTES = 60000
MILLISECONDS = 1
COUNT = 1
MYRIAD = 10000  # Korean "만"

# Text allowed between a field keyword and its numeral: short, and never
# another field keyword or digit, so "디스크 ... 버퍼 10000" feeds buffer only.
GAP = r"(?:(?!버퍼|논리|디스크|물리|실행|\d).){0,15}?"

# Declared order matters: per field only the first matching rule counts.
# Every rule anchors its numeral to a unit or a field keyword so one number
# cannot feed two fields.
THRESHOLD_RULES = (
    # Elapsed time, lower bound
    rule(NUMBER + r"\s*분\s*" + AT_LEAST, "min_elapsed_time", MINUTES),
    rule(NUMBER + r"\s*(?:ms|밀리초)\s*" + AT_LEAST, "min_elapsed_time", MILLISECONDS),
    rule(NUMBER + r"\s*초\s*" + AT_LEAST, "min_elapsed_time", SECONDS),
    rule(r"(?:over|more than|longer than|at least|above|>=?)\s*" + NUMBER + r"\s*(?:ms|milliseconds?)\b",
         "min_elapsed_time", MILLISECONDS),
    rule(r"(?:over|more than|longer than|at least|above|>=?)\s*" + NUMBER + r"\s*(?:s|secs?|seconds?)\b",
         "min_elapsed_time", SECONDS),
    rule(r"(?:over|more than|longer than|at least|above|>=?)\s*" + NUMBER + r"\s*(?:m|mins?|minutes?)\b",
         "min_elapsed_time", MINUTES),

    # Elapsed time, upper bound
    rule(NUMBER + r"\s*분\s*" + AT_MOST, "max_elapsed_time", MINUTES),
    rule(NUMBER + r"\s*(?:ms|밀리초)\s*" + AT_MOST, "max_elapsed_time", MILLISECONDS),
    rule(NUMBER + r"\s*초\s*" + AT_MOST, "max_elapsed_time", SECONDS),
    rule(r"(?:under|less than|below|within|<=?)\s*" + NUMBER + r"\s*(?:ms|milliseconds?)\b",
         "max_elapsed_time", MILLISECONDS),
    rule(r"(?:under|less than|below|within|<=?)\s*" + NUMBER + r"\s*(?:s|secs?|seconds?)\b",
         "max_elapsed_time", SECONDS),

    # Buffer gets
    rule(r"(?:버퍼|논리)" + GAP + NUMBER + r"\s*만\s*" + AT_LEAST, "min_buffer_gets", MYRIAD),
    rule(r"버퍼" + GAP + NUMBER + r"\s*" + AT_LEAST, "min_buffer_gets", COUNT),
    rule(NUMBER + r"\s*버퍼\s*" + AT_LEAST, "min_buffer_gets", COUNT),
    rule(r"논리" + GAP + NUMBER + r"\s*" + AT_LEAST, "min_buffer_gets", COUNT),
    rule(r"buffer(?:\s*gets?)?\s*(?:over|more than|above|>=?)\s*" + NUMBER, "min_buffer_gets", COUNT),
    rule(r"버퍼" + GAP + NUMBER + r"\s*" + AT_MOST, "max_buffer_gets", COUNT),
    rule(r"buffer(?:\s*gets?)?\s*(?:under|less than|below|<=?)\s*" + NUMBER, "max_buffer_gets", COUNT),

    # Disk reads
    rule(r"(?:디스크|물리)" + GAP + NUMBER + r"\s*만\s*" + AT_LEAST, "min_disk_reads", MYRIAD),
    rule(r"디스크" + GAP + NUMBER + r"\s*" + AT_LEAST, "min_disk_reads", COUNT),
    rule(NUMBER + r"\s*디스크\s*" + AT_LEAST, "min_disk_reads", COUNT),
    rule(r"물리" + GAP + NUMBER + r"\s*" + AT_LEAST, "min_disk_reads", COUNT),
    rule(r"disk(?:\s*reads?)?\s*(?:over|more than|above|>=?)\s*" + NUMBER, "min_disk_reads", COUNT),

    # Execution count
    rule(NUMBER + r"\s*만\s*(?:번|회)\s*" + AT_LEAST, "min_executions", MYRIAD),
    rule(NUMBER + r"\s*번\s*" + AT_LEAST + r"\s*실행", "min_executions", COUNT),
    rule(r"실행" + GAP + NUMBER + r"\s*번\s*" + AT_LEAST, "min_executions", COUNT),
    rule(NUMBER + r"\s*(?:번|회)\s*" + AT_LEAST, "min_executions", COUNT),
    rule(r"(?:executed|executions?|runs?)\s*(?:over|more than|above|>=?)\s*" + NUMBER, "min_executions", COUNT),
    rule(r"(?:over|more than|at least)\s*" + NUMBER + r"\s*(?:times|executions)\b", "min_executions", COUNT),
)


class ThresholdExtractor:
    """Extract metric thresholds; distinct fields combine, one value per field."""

    def __init__(self, rules: tuple = THRESHOLD_RULES):
        self.rules = rules

    def extract(self, query: str) -> Dict[str, Union[int, float]]:
        thresholds: Dict[str, Union[int, float]] = {}
        if not query:
            return thresholds

        for field_name, (matched_rule, match) in first_match_per_field(self.rules, query).items():
            value = matched_rule.value(match)
            if value is None or value <= 0:
                continue
            thresholds[field_name] = value

        if thresholds:
            logger.debug("Thresholds extracted", thresholds=thresholds)
        return thresholds


threshold_extractor = ThresholdExtractor()
