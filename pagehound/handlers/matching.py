"""
Body matching handlers.

StringMatch and RegexMatch search the raw response body and record the
first match. Offsets are byte offsets into the body.
"""

import re

from pagehound.core.context import CrawlContext
from pagehound.documents import Document
from pagehound.exceptions import ConfigurationError
from pagehound.handlers.base import Handler
from pagehound.utils.options import as_bool


class StringMatch(Handler):
    """Record the first occurrence of a literal string in the body."""

    type_name = "StringMatch"
    OPTIONS = {"match": "match", "matchcase": "match_case", "match_case": "match_case"}

    def __init__(
        self,
        match: str | None = None,
        match_case: bool = False,
        **kwargs,
    ):
        if not isinstance(match, str) or not match:
            raise ConfigurationError("StringMatch requires a non-empty 'match' string", option="match")

        super().__init__(**kwargs)
        self.match = match
        self.match_case = as_bool(match_case, "matchcase")
        self._needle = match.encode("utf-8")

    def handle(self, document: Document, context: CrawlContext) -> None:
        if self.match_case:
            offset = document.body.find(self._needle)
        else:
            offset = document.body.lower().find(self._needle.lower())

        if offset != -1:
            context.log(self.name, {
                "message": "Document body matched lookup string",
                "needle": self.match,
                "offset": offset,
            })


class RegexMatch(Handler):
    """Record the first match of a regular expression in the body."""

    type_name = "RegexMatch"
    OPTIONS = {"match": "match", "matchcase": "match_case", "match_case": "match_case"}

    def __init__(
        self,
        match: str | None = None,
        match_case: bool = True,
        **kwargs,
    ):
        if not isinstance(match, str) or not match:
            raise ConfigurationError("RegexMatch requires a 'match' pattern", option="match")

        super().__init__(**kwargs)
        self.match = match
        self.match_case = as_bool(match_case, "matchcase")

        flags = 0 if self.match_case else re.IGNORECASE
        try:
            self._pattern = re.compile(match.encode("utf-8"), flags)
        except re.error as e:
            raise ConfigurationError(
                f"Invalid regular expression '{match}': {e}", option="match"
            ) from e

    def handle(self, document: Document, context: CrawlContext) -> None:
        found = self._pattern.search(document.body)
        if found:
            context.log(self.name, {
                "message": "Document body matched lookup expression",
                "regex": self.match,
                "match": found.group(0).decode("utf-8", errors="replace"),
                "offset": found.start(),
            })
