from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from models import (
    CompanyCount,
    CompanyNode,
    ContactNode,
    ContactRecord,
    NetworkSummary,
    RootNode,
)


DEFAULT_MAX_COMPANIES = 50
DEFAULT_ROOT_LABEL = "My Network"


def group_by_company(records: Iterable[ContactRecord]) -> Dict[str, List[ContactRecord]]:
    """Group by exact company string; keys keep first-appearance order, members keep input order."""
    groups: Dict[str, List[ContactRecord]] = {}
    for record in records:
        groups.setdefault(record.company, []).append(record)
    return groups


def rank_companies(groups: Dict[str, List[ContactRecord]]) -> List[Tuple[str, List[ContactRecord]]]:
    # sorted() is stable, so equal sizes keep first-appearance order
    return sorted(groups.items(), key=lambda item: len(item[1]), reverse=True)


def build_summary(
    records: Sequence[ContactRecord],
    ranked: Optional[List[Tuple[str, List[ContactRecord]]]] = None,
) -> NetworkSummary:
    if ranked is None:
        ranked = rank_companies(group_by_company(records))
    return NetworkSummary(
        total_connections=len(records),
        total_companies=len(ranked),
        top_companies=tuple(CompanyCount(name=name, count=len(members)) for name, members in ranked),
    )


def build_tree(
    ranked: List[Tuple[str, List[ContactRecord]]],
    max_companies: int = DEFAULT_MAX_COMPANIES,
    root_label: str = DEFAULT_ROOT_LABEL,
) -> RootNode:
    if max_companies < 0:
        raise ValueError(f"max_companies must be >= 0, got {max_companies}")
    companies = tuple(
        CompanyNode(
            name=name,
            children=tuple(ContactNode(name=m.display_name, info=m) for m in members),
        )
        for name, members in ranked[:max_companies]
    )
    return RootNode(name=root_label, children=companies)


def aggregate(
    records: Sequence[ContactRecord],
    *,
    max_companies: int = DEFAULT_MAX_COMPANIES,
    root_label: str = DEFAULT_ROOT_LABEL,
) -> Tuple[RootNode, NetworkSummary]:
    """Build the bounded tree and the full summary from one grouping pass."""
    ranked = rank_companies(group_by_company(records))
    tree = build_tree(ranked, max_companies=max_companies, root_label=root_label)
    return tree, build_summary(records, ranked)
