from __future__ import annotations

import logging

from pipelines.runner import RunContext
from services.csv_parser import ConnectionsCsvParser


logger = logging.getLogger(__name__)


class ParseConnections:
    def __init__(self, policy: str = "strict") -> None:
        self.parser = ConnectionsCsvParser(policy)

    def run(self, ctx: RunContext) -> RunContext:
        ctx.connections = self.parser.parse(ctx.text)
        stats = self.parser.get_parse_stats()
        ctx.meta["parse_stats"] = stats
        if stats["dropped_missing_company"]:
            logger.info(
                "Dropped %s rows without a company",
                stats["dropped_missing_company"],
                extra={"step": "parse_connections"},
            )
        logger.info(
            "Parsed connections",
            extra={"step": "parse_connections", "rows": len(ctx.connections), "status": "ok"},
        )
        return ctx
