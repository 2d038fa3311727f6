from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from config.settings import Settings, get_settings
from models import NetworkResult
from pipelines.runner import Pipeline, RunContext
from pipelines.steps import AggregateNetwork, ParseConnections


def build_network(
    text: str,
    settings: Optional[Settings] = None,
    *,
    policy: Optional[str] = None,
    max_companies: Optional[int] = None,
) -> NetworkResult:
    """Parse an export and aggregate it into a fresh NetworkResult.

    Keyword overrides take precedence over settings. Nothing is cached between calls.
    """
    settings = settings or get_settings()
    pipeline = Pipeline([
        ParseConnections(policy or settings.csv_tokenizer),
        AggregateNetwork(
            max_companies=settings.tree_max_companies if max_companies is None else max_companies,
            root_label=settings.tree_root_label,
        ),
    ])
    ctx = pipeline.run(RunContext(text=text))
    return NetworkResult(connections=ctx.connections, tree=ctx.tree, summary=ctx.summary)


def load_network(
    path: Union[str, Path],
    settings: Optional[Settings] = None,
    **overrides,
) -> NetworkResult:
    # utf-8-sig drops the BOM some spreadsheet tools add
    text = Path(path).read_text(encoding="utf-8-sig")
    return build_network(text, settings, **overrides)
