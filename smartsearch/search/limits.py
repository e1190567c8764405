"""
Result-count extraction for SQL smart search

"상위 5개", "top 10", "하나만", "가장 느린 쿼리" -> an integer limit.

A singular superlative ("가장 느린 쿼리") means exactly one result, while a
plural one ("가장 느린 쿼리들") or no superlative at all leaves the limit unset.
"""

from typing import Optional

import structlog

from smartsearch.search.filters import MAX_LIMIT
from smartsearch.search.rules import NUMBER, iter_matches, rule

logger = structlog.get_logger(__name__)

_SUPERLATIVE_ADJECTIVE = r"(?:느린|빠른|많은|큰|작은|무거운|오래\s*걸리는)"
_QUERY_NOUN = r"(?:쿼리|sql|문장|statement)"

LIMIT_RULES = (
    # "5개", "5개만" (not "3개월")
    rule(NUMBER + r"\s*개(?!월)", "limit"),
    # "상위 5", "톱 5", "top 5"
    rule(r"(?:상위|톱|top)\s*" + NUMBER, "limit"),
    # Korean number words
    rule(r"단\s*하나|하나(?:만)?|한\s*개", "limit", fixed=1),
    rule(r"두\s*개|둘", "limit", fixed=2),
    rule(r"세\s*개|셋", "limit", fixed=3),
    rule(r"다섯\s*개", "limit", fixed=5),
    rule(r"열\s*개", "limit", fixed=10),
    rule(r"스무\s*개", "limit", fixed=20),
    # Singular superlative without a count
    rule(
        r"가장\s*" + _SUPERLATIVE_ADJECTIVE
        + r"(?!\s*(?:" + _QUERY_NOUN + r")?\s*(?:\d|들))",
        "limit",
        fixed=1,
    ),
    rule(
        r"\bthe\s+(?:slowest|fastest|heaviest|largest|most\s+\w+)\s+(?:sql\s+)?(?:query|statement)\b",
        "limit",
        fixed=1,
    ),
)


class LimitExtractor:
    """First rule yielding a positive count wins; results are clamped to MAX_LIMIT."""

    def __init__(self, rules: tuple = LIMIT_RULES, max_limit: int = MAX_LIMIT):
        self.rules = rules
        self.max_limit = max_limit

    def extract(self, query: str) -> Optional[int]:
        if not query:
            return None

        for matched_rule, match in iter_matches(self.rules, query):
            value = matched_rule.value(match)
            if value is None or value < 1:
                logger.debug("Ignoring non-positive limit", match=match.group(0))
                continue
            return min(int(value), self.max_limit)
        return None


limit_extractor = LimitExtractor()
