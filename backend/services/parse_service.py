"""Parse service - turns schema.rb text into a graph."""

from typing import Optional

from fastapi.concurrency import run_in_threadpool

from SCHEMA2ERD.config import ParserOptions
from SCHEMA2ERD.ir.models import ParseResult
from SCHEMA2ERD.parser import parse_schema


class ParseService:
    """Runs the two-tier schema parser."""

    def __init__(self, options: Optional[ParserOptions] = None):
        self.options = options

    async def parse(self, schema: str) -> ParseResult:
        """Graph for `schema`, or a ParseFailure when neither tier accepts it."""
        return await run_in_threadpool(parse_schema, schema, self.options)
