from __future__ import annotations

from pipelines.runner import RunContext
from services.aggregator import DEFAULT_MAX_COMPANIES, DEFAULT_ROOT_LABEL, aggregate


class AggregateNetwork:
    def __init__(self, max_companies: int = DEFAULT_MAX_COMPANIES, root_label: str = DEFAULT_ROOT_LABEL) -> None:
        self.max_companies = max_companies
        self.root_label = root_label

    def run(self, ctx: RunContext) -> RunContext:
        ctx.tree, ctx.summary = aggregate(
            ctx.connections,
            max_companies=self.max_companies,
            root_label=self.root_label,
        )
        ctx.meta["tree_companies"] = len(ctx.tree.children)
        return ctx
