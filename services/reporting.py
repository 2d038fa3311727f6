from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional, Union

from models import CompanyNode, ContactNode, NetworkSummary, RootNode


AnyNode = Union[RootNode, CompanyNode, ContactNode]

BAR_WIDTH = 30


def _llm_usage_for_run(run_id: str) -> Dict[str, Dict[str, int]]:
    """Aggregate LLM usage from the JSONL trace for the given run_id.

    Returns dict like { 'openai': {'calls': N, 'tokens': T} }
    """
    from config.settings import get_settings

    result: Dict[str, Dict[str, int]] = {}
    log_path = Path(get_settings().llm_log_path)
    if not log_path.exists():
        return result
    with log_path.open("r", encoding="utf-8") as f:
        for line in f:
            try:
                rec = json.loads(line)
            except json.JSONDecodeError:
                continue
            if not isinstance(rec, dict) or rec.get("run_id") != run_id:
                continue
            bucket = result.setdefault(rec.get("provider") or "unknown", {"calls": 0, "tokens": 0})
            bucket["calls"] += 1
            bucket["tokens"] += int((rec.get("usage") or {}).get("total_tokens") or 0)
    return result


def print_summary(summary: NetworkSummary, top: int = 5) -> None:
    """Print the overview block and a text bar chart of the biggest companies."""
    print("\n" + "=" * 60)
    print("NETWORK OVERVIEW")
    print("=" * 60)
    print(f"Connections: {summary.total_connections}")
    print(f"Companies: {summary.total_companies}")
    leaders = summary.top(top)
    if leaders:
        print()
        print(f"Top {len(leaders)} Companies:")
        widest = max(c.count for c in leaders)
        label_width = max(len(c.name) for c in leaders)
        for c in leaders:
            bar = "#" * max(1, round(BAR_WIDTH * c.count / widest))
            print(f"  {c.name.ljust(label_width)}  {bar} {c.count}")
    print("=" * 60)


def print_llm_usage(run_id: Optional[str]) -> None:
    from config.settings import get_settings

    if not run_id or not get_settings().llm_trace:
        return
    usage = _llm_usage_for_run(run_id)
    if usage:
        print("LLM Usage:")
        for provider, stats in usage.items():
            print(f"  {provider}: calls={stats['calls']}, tokens={stats['tokens']}")


def render_tree(root: RootNode, max_contacts: Optional[int] = None) -> str:
    lines: List[str] = [f"{root.name} ({len(root.children)} companies, {root.contact_count} contacts)"]
    for ci, company in enumerate(root.children):
        last_company = ci == len(root.children) - 1
        lines.append(f"{'└── ' if last_company else '├── '}{company.name} ({company.weight})")
        indent = "    " if last_company else "│   "
        shown = company.children if max_contacts is None else company.children[:max_contacts]
        hidden = company.weight - len(shown)
        for pi, contact in enumerate(shown):
            last = pi == len(shown) - 1 and not hidden
            lines.append(f"{indent}{'└── ' if last else '├── '}{contact.name}")
        if hidden:
            lines.append(f"{indent}└── ... {hidden} more")
    return "\n".join(lines)


def find_node(root: RootNode, name: str) -> Optional[AnyNode]:
    """Return the first node named ``name`` in root, company, contact order (pre-order)."""
    if root.name == name:
        return root
    for company in root.children:
        if company.name == name:
            return company
        for contact in company.children:
            if contact.name == name:
                return contact
    return None


def describe_node(node: AnyNode) -> Dict[str, str]:
    if isinstance(node, ContactNode):
        info = node.info
        details = {
            "name": node.name,
            "position": info.position,
            "company": info.company,
            "connected": info.connected_on,
        }
        if info.url:
            details["profile"] = info.url
        return details
    return {
        "name": node.name,
        "type": node.type,
        "connections": str(len(node.children)),
    }
