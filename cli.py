import argparse
import asyncio
import json
import logging
import os
import uuid as _uuid
from pathlib import Path

from config.settings import TOKENIZER_POLICIES, get_settings
from pipelines.build_network import load_network
from services.insights import InsightRequester, InsightState
from services.llm_client import get_llm_client
from services.reporting import describe_node, find_node, print_llm_usage, print_summary, render_tree
from utils.logging_setup import init_logging


logger = logging.getLogger(__name__)

NO_CONNECTIONS = "No connections found (is this a LinkedIn Connections.csv export?)"


def _non_negative_int(value):
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if number < 0:
        raise argparse.ArgumentTypeError("must be >= 0")
    return number


def _load(args):
    overrides = {}
    if args.tokenizer:
        overrides["policy"] = args.tokenizer
    if getattr(args, "max_companies", None) is not None:
        overrides["max_companies"] = args.max_companies
    return load_network(args.input, **overrides)


def cmd_summary(args):
    result = _load(args)
    if result.is_empty:
        print(NO_CONNECTIONS)
        return
    if args.json:
        print(json.dumps(result.summary.model_dump(by_alias=True), indent=2, ensure_ascii=False))
        return
    print_summary(result.summary, top=args.top)


def cmd_tree(args):
    result = _load(args)
    if result.is_empty:
        print(NO_CONNECTIONS)
        return
    if args.json:
        print(json.dumps(result.tree.model_dump(by_alias=True), indent=2, ensure_ascii=False))
        return
    print(render_tree(result.tree, max_contacts=args.max_contacts))


def cmd_inspect(args):
    result = _load(args)
    node = find_node(result.tree, args.name)
    if node is None:
        print(f"No node named {args.name!r} in the tree")
        return
    details = describe_node(node)
    width = max(len(k) for k in details)
    for key, value in details.items():
        print(f"{key.capitalize().ljust(width)} : {value}")


def cmd_insights(args):
    if not os.getenv("RUN_ID"):
        os.environ["RUN_ID"] = _uuid.uuid4().hex
    result = _load(args)
    if result.is_empty:
        print(NO_CONNECTIONS)
        return
    requester = InsightRequester(get_llm_client())
    text = asyncio.run(requester.request(result.connections))
    print(text)
    if requester.state is InsightState.FAILURE:
        logger.warning("Insights fell back to the failure message", extra={"status": "error"})
    print_llm_usage(os.getenv("RUN_ID"))


def cmd_export(args):
    result = _load(args)
    payload = {
        "summary": result.summary.model_dump(by_alias=True),
        "tree": result.tree.model_dump(by_alias=True),
    }
    out = Path(args.output)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    print(f"Wrote {result.summary.total_connections} connections across {len(result.tree.children)} companies to {out}")


def main():
    settings = get_settings()
    parser = argparse.ArgumentParser(description="NetMapper: map a LinkedIn connections export by company")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level (default from settings)")
    parser.add_argument("--tokenizer", choices=TOKENIZER_POLICIES, default=None, help=f"Row tokenizer (default: {settings.csv_tokenizer})")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_sum = sub.add_parser("summary", help="Show connection/company totals and the top companies")
    p_sum.add_argument("--input", required=True, help="Path to Connections.csv")
    p_sum.add_argument("--top", type=int, default=5, help="How many companies to chart (default: 5)")
    p_sum.add_argument("--json", action="store_true", help="Print the full summary as JSON")
    p_sum.set_defaults(func=cmd_summary)

    p_tree = sub.add_parser("tree", help="Print the company -> contact tree")
    p_tree.add_argument("--input", required=True, help="Path to Connections.csv")
    p_tree.add_argument("--max-companies", type=_non_negative_int, default=None, help=f"Company branches to keep (default: {settings.tree_max_companies})")
    p_tree.add_argument("--max-contacts", type=int, default=None, help="Contacts to list per company (default: all)")
    p_tree.add_argument("--json", action="store_true", help="Print the tree as JSON")
    p_tree.set_defaults(func=cmd_tree)

    p_ins = sub.add_parser("inspect", help="Show details for a company or contact in the tree")
    p_ins.add_argument("--input", required=True, help="Path to Connections.csv")
    p_ins.add_argument("--name", required=True, help="Company name or contact display name")
    p_ins.add_argument("--max-companies", type=_non_negative_int, default=None, help="Company branches to keep")
    p_ins.set_defaults(func=cmd_inspect)

    p_ai = sub.add_parser("insights", help="Generate narrative network insights (provider from settings.ai_provider)")
    p_ai.add_argument("--input", required=True, help="Path to Connections.csv")
    p_ai.set_defaults(func=cmd_insights)

    p_exp = sub.add_parser("export", help="Write summary and tree as JSON")
    p_exp.add_argument("--input", required=True, help="Path to Connections.csv")
    p_exp.add_argument("--output", required=True, help="Destination JSON file")
    p_exp.add_argument("--max-companies", type=_non_negative_int, default=None, help="Company branches to keep")
    p_exp.set_defaults(func=cmd_export)

    args = parser.parse_args()
    init_logging(args.log_level)
    args.func(args)


if __name__ == "__main__":
    main()
