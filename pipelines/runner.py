from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from models import NetworkSummary, RootNode
from utils.logging_setup import init_logging


logger = logging.getLogger(__name__)


@dataclass
class RunContext:
    text: str = ""
    connections: tuple = ()
    tree: Optional[RootNode] = None
    summary: Optional[NetworkSummary] = None
    meta: dict = field(default_factory=dict)


class Step(Protocol):
    def run(self, ctx: RunContext) -> RunContext:
        ...


class Pipeline:
    def __init__(self, steps: List[Step]):
        self.steps = steps

    def run(self, ctx: RunContext) -> RunContext:
        # Make logging idempotent for any direct runner use
        init_logging()
        for step in self.steps:
            name = type(step).__name__
            t0 = time.perf_counter()
            ctx = step.run(ctx)
            logger.debug(
                "step finished",
                extra={"step": name, "status": "ok", "duration_ms": int((time.perf_counter() - t0) * 1000)},
            )
        return ctx
