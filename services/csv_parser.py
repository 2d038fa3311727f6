from __future__ import annotations

import csv
import logging
import re
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from config.settings import TOKENIZER_POLICIES
from models import ContactRecord


logger = logging.getLogger(__name__)

# LinkedIn prepends a "Notes:" preamble; the real header is the first line naming this column
HEADER_MARKER = "First Name"

# Quoted span, or a run without comma/quote/whitespace, followed by a comma or end of line.
# Empty cells produce no token.
_COMPAT_TOKEN_RE = re.compile(r'(".*?"|[^",\s]+)(?=\s*,|\s*\Z)')


class ContactField(str, Enum):
    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    COMPANY = "company"
    POSITION = "position"
    CONNECTED_ON = "connected_on"
    URL = "url"
    EMAIL = "email"


# Normalized header substring -> record field. Checked in order, first match wins.
HEADER_KEYS: Tuple[Tuple[str, ContactField], ...] = (
    ("firstname", ContactField.FIRST_NAME),
    ("lastname", ContactField.LAST_NAME),
    ("company", ContactField.COMPANY),
    ("position", ContactField.POSITION),
    ("occupation", ContactField.POSITION),
    ("connectedon", ContactField.CONNECTED_ON),
    ("url", ContactField.URL),
    ("email", ContactField.EMAIL),
)


def clean_cell(value: str) -> str:
    """Trim and drop one leading and one trailing double quote."""
    value = value.strip()
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value


def normalize_header(name: str) -> str:
    return "".join(name.lower().split())


def match_header(name: str) -> Optional[ContactField]:
    key = normalize_header(name)
    for needle, field in HEADER_KEYS:
        if needle in key:
            return field
    return None


class ConnectionsCsvParser:
    def __init__(self, policy: str = "strict") -> None:
        if policy not in TOKENIZER_POLICIES:
            raise ValueError(f"Unknown tokenizer policy: {policy}")
        self.policy = policy
        self.parse_stats: Dict[str, Any] = self._fresh_stats()

    @staticmethod
    def _fresh_stats() -> Dict[str, Any]:
        return {
            'header_found': False,
            'data_rows': 0,
            'accepted': 0,
            'dropped_missing_company': 0,
        }

    def tokenize(self, line: str) -> List[str]:
        """Split one data line into cleaned cell values according to the policy."""
        if self.policy == "compat":
            return [clean_cell(t) for t in _COMPAT_TOKEN_RE.findall(line)]
        try:
            cells = next(csv.reader([line], skipinitialspace=True), [])
        except csv.Error as e:
            logger.debug("csv reader rejected line, splitting on commas: %s", e)
            cells = line.split(",")
        return [clean_cell(c) for c in cells]

    def split_header(self, line: str) -> List[str]:
        return [clean_cell(h) for h in line.split(",")]

    def map_headers(self, headers: Sequence[str]) -> List[Optional[ContactField]]:
        return [match_header(h) for h in headers]

    def build_record(self, fields: Sequence[Optional[ContactField]], tokens: Sequence[str]) -> ContactRecord:
        values: Dict[str, str] = {}
        for index, field in enumerate(fields):
            if field is None:
                continue
            # Later columns overwrite earlier ones mapped to the same field
            values[field.value] = tokens[index] if index < len(tokens) else ""
        return ContactRecord(**values)

    def parse(self, text: str) -> Tuple[ContactRecord, ...]:
        """Parse an exported connections file into records that have a company.

        Returns an empty tuple when no header line is found.
        """
        self.parse_stats = self._fresh_stats()
        lines = [line for line in (text or "").split("\n") if line.strip()]
        header_index = next((i for i, line in enumerate(lines) if HEADER_MARKER in line), None)
        if header_index is None:
            logger.info("No header line containing %r found", HEADER_MARKER)
            return ()

        self.parse_stats['header_found'] = True
        fields = self.map_headers(self.split_header(lines[header_index]))

        records: List[ContactRecord] = []
        for line in lines[header_index + 1:]:
            self.parse_stats['data_rows'] += 1
            record = self.build_record(fields, self.tokenize(line))
            if not record.company:
                self.parse_stats['dropped_missing_company'] += 1
                continue
            records.append(record)

        self.parse_stats['accepted'] = len(records)
        return tuple(records)

    def get_parse_stats(self) -> Dict[str, Any]:
        return dict(self.parse_stats)


def parse_connections(text: str, policy: str = "strict") -> Tuple[ContactRecord, ...]:
    return ConnectionsCsvParser(policy).parse(text)
