"""
Schema/table scope detection for SQL smart search

Priority 1 is a fixed allow-list of well-known Oracle schema names; only when
none of them appears are the generic "IDENT.IDENT" / "IDENT 스키마" /
"IDENT 테이블" patterns tried.
"""

from dataclasses import dataclass
from typing import Optional
import re

import structlog

from smartsearch.search.rules import first_match, rule

logger = structlog.get_logger(__name__)

IDENTIFIER = r"[A-Za-z_][A-Za-z0-9_]*"

# Identifier boundaries; \b would treat Hangul as word characters
_NOT_AFTER_IDENT = r"(?<![A-Za-z0-9_])"
_NOT_BEFORE_IDENT = r"(?![A-Za-z0-9_])"

COMMON_SCHEMAS = (
    "HR", "OE", "SH", "PM", "IX", "BI",
    "SCOTT", "SYSTEM", "SYS",
    "APP", "DATA", "PROD", "DEV", "TEST", "STG",
    "ADMIN", "BATCH", "ONLINE", "WEB", "API",
)

_COMMON_SCHEMA_PATTERNS = tuple(
    (name, re.compile(_NOT_AFTER_IDENT + re.escape(name) + _NOT_BEFORE_IDENT, re.IGNORECASE))
    for name in COMMON_SCHEMAS
)

# Named groups decide which of schema/table a rule yields
SCHEMA_TABLE_RULES = (
    rule(_NOT_AFTER_IDENT + r"(?P<schema>" + IDENTIFIER + r")\.(?P<table>" + IDENTIFIER + r")",
         "schema_table"),
    rule(_NOT_AFTER_IDENT + r"(?P<schema>" + IDENTIFIER + r")\s*스키마.*?"
         + _NOT_AFTER_IDENT + r"(?P<table>" + IDENTIFIER + r")\s*테이블",
         "schema_table"),
    rule(_NOT_AFTER_IDENT + r"(?P<table>" + IDENTIFIER + r")\s*테이블", "table"),
    rule(_NOT_AFTER_IDENT + r"(?P<schema>" + IDENTIFIER + r")\s*스키마", "schema"),
    # English forms only accept upper-case identifiers ("schema SALES")
    rule(r"\bschema\s+(?P<schema>[A-Z_][A-Z0-9_]*)" + _NOT_BEFORE_IDENT, "schema", flags=0),
    rule(r"\btable\s+(?P<table>[A-Z_][A-Z0-9_]*)" + _NOT_BEFORE_IDENT, "table", flags=0),
)


@dataclass(frozen=True)
class SchemaTable:
    schema: Optional[str] = None
    table: Optional[str] = None

    def describe(self) -> str:
        if self.schema and self.table:
            return f"{self.schema}.{self.table}"
        return self.schema or self.table or ""


class SchemaTableDetector:
    """Detect explicit schema/table scoping; identifiers come back upper-cased."""

    def detect(self, query: str) -> Optional[SchemaTable]:
        if not query:
            return None

        for name, pattern in _COMMON_SCHEMA_PATTERNS:
            if pattern.search(query):
                qualified = re.search(
                    _NOT_AFTER_IDENT + re.escape(name) + r"\.(" + IDENTIFIER + r")",
                    query,
                    re.IGNORECASE,
                )
                if qualified:
                    return SchemaTable(schema=name, table=qualified.group(1).upper())
                return SchemaTable(schema=name)

        found = first_match(SCHEMA_TABLE_RULES, query)
        if not found:
            return None

        _, match = found
        groups = match.groupdict()
        schema = groups.get("schema")
        table = groups.get("table")
        detected = SchemaTable(
            schema=schema.upper() if schema else None,
            table=table.upper() if table else None,
        )
        logger.debug("Schema/table detected", schema=detected.schema, table=detected.table)
        return detected


schema_table_detector = SchemaTableDetector()
