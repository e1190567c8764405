"""
Pattern Rules - Declarative regex tables for search query extraction

Every extraction concern (thresholds, result limits, schema/table scope) is
declared as an ordered tuple of PatternRule entries and evaluated by the same
first-match interpreter:

- iter_matches(rules, text) -> every (rule, match), in declared order
- first_match(rules, text) -> (rule, match) for the first rule that matches
- first_match_per_field(rules, text) -> {field: (rule, match)}

Adding a synonym or phrasing is a data change to one of those tables, never a
new code path.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Optional, Pattern, Tuple, Union
import math
import re

# A numeral as users type it: "5", "10,000", "1.5"
NUMBER = r"(\d[\d,]*(?:\.\d+)?)"

# Comparison words that mark a lower bound ("이상", "넘는", "초과")
AT_LEAST = r"(?:이상|넘는|넘게|초과)"

# Comparison words that mark an upper bound ("이하", "미만", "이내")
AT_MOST = r"(?:이하|미만|이내)"


@dataclass(frozen=True)
class PatternRule:
    """One (regex, target field, unit multiplier) triple.

    ``fixed`` replaces the captured numeral for phrasings that carry their
    value in words ("하나" -> 1).
    """
    pattern: Pattern[str]
    field: str
    multiplier: float = 1
    fixed: Optional[float] = None

    def value(self, match: "re.Match[str]") -> Optional[Union[int, float]]:
        """Numeric value of a match, unit multiplier applied."""
        if self.fixed is not None:
            return normalize_number(self.fixed)
        raw = parse_number(match.group(1))
        if raw is None:
            return None
        return normalize_number(raw * self.multiplier)


def rule(
    regex: str,
    field: str,
    multiplier: float = 1,
    fixed: Optional[float] = None,
    flags: int = re.IGNORECASE,
) -> PatternRule:
    """Compile a PatternRule; tables are built once at import time."""
    return PatternRule(re.compile(regex, flags), field, multiplier, fixed)


def parse_number(text: Optional[str]) -> Optional[float]:
    if not text:
        return None
    try:
        value = float(text.replace(",", ""))
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def normalize_number(value: float) -> Union[int, float]:
    """Integral floats become ints so 5 * 1000 serializes as 5000, not 5000.0."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def iter_matches(
    rules: Iterable[PatternRule],
    text: str,
) -> Iterator[Tuple[PatternRule, "re.Match[str]"]]:
    """Yield (rule, match) for every matching rule, in declared order."""
    for candidate in rules:
        match = candidate.pattern.search(text)
        if match:
            yield candidate, match


def first_match(
    rules: Iterable[PatternRule],
    text: str,
) -> Optional[Tuple[PatternRule, "re.Match[str]"]]:
    """Return the first rule (in declared order) whose pattern matches text."""
    return next(iter_matches(rules, text), None)


def first_match_per_field(
    rules: Iterable[PatternRule],
    text: str,
) -> Dict[str, Tuple[PatternRule, "re.Match[str]"]]:
    """First matching rule for each distinct field.

    Later rules for a field that already matched are skipped, but other
    fields keep being evaluated, so compound conditions combine.
    """
    matched: Dict[str, Tuple[PatternRule, "re.Match[str]"]] = {}
    for candidate in rules:
        if candidate.field in matched:
            continue
        match = candidate.pattern.search(text)
        if match:
            matched[candidate.field] = (candidate, match)
    return matched
