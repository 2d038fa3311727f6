from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Optional, Sequence

from config.settings import get_settings
from models import ContactRecord
from ports.llm import LLMClientPort
from services.aggregator import group_by_company, rank_companies


logger = logging.getLogger(__name__)

NO_INSIGHTS_MESSAGE = "No insights generated."
FAILURE_MESSAGE = "Failed to generate AI insights. Check your network size or try again later."

SYSTEM_PROMPT = "You are a career strategist who analyzes professional networks."

PROMPT_TEMPLATE = """Analyze this professional network data from a LinkedIn export.
Top Companies: {top_companies}
Sample Roles: {sample_roles}
Total Connections: {total}

Please provide:
1. A summary of the network's industry focus.
2. Potential career opportunities or transitions suggested by this network.
3. Three specific networking strategies for this user based on their current reach.
Format the response in clean Markdown."""


def build_insight_prompt(
    connections: Sequence[ContactRecord],
    sample_size: int = 50,
    top_n: int = 10,
) -> str:
    """Summarize the records into a prompt small enough for one request.

    Only the first ``sample_size`` roles and the ``top_n`` largest companies are sent.
    """
    sample_roles = ", ".join(f"{c.position} at {c.company}" for c in connections[:sample_size])
    ranked = rank_companies(group_by_company(connections))[:top_n]
    top_companies = ", ".join(f"{name} ({len(members)})" for name, members in ranked)
    return PROMPT_TEMPLATE.format(
        top_companies=top_companies,
        sample_roles=sample_roles,
        total=len(connections),
    )


def fetch_network_insights(
    connections: Sequence[ContactRecord],
    client: Optional[LLMClientPort] = None,
) -> str:
    """Ask the LLM for a narrative about the network. Client errors propagate."""
    settings = get_settings()
    if client is None:
        from services.llm_client import get_llm_client
        client = get_llm_client()

    prompt = build_insight_prompt(
        connections,
        sample_size=settings.insight_sample_size,
        top_n=settings.insight_top_companies,
    )
    resp = client.chat(
        use_case="network_insights",
        messages=[
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ],
        prompt_name="network_insights",
        prompt_text=prompt,
    )
    choices = getattr(resp, "choices", None) or []
    content = choices[0].message.content if choices else None
    return content or NO_INSIGHTS_MESSAGE


def get_network_insights(
    connections: Sequence[ContactRecord],
    client: Optional[LLMClientPort] = None,
) -> str:
    """Like fetch_network_insights but returns FAILURE_MESSAGE instead of raising."""
    try:
        return fetch_network_insights(connections, client)
    except Exception:
        logger.exception("AI insights request failed", extra={"status": "error"})
        return FAILURE_MESSAGE


class InsightState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


class InsightRequestPending(RuntimeError):
    pass


class InsightRequester:
    """Single-outstanding insight request with an explicit state machine.

    idle -> pending -> success | failure. A cancelled request stays pending until its
    worker thread returns, then goes back to idle with the result discarded.
    """

    def __init__(self, client: Optional[LLMClientPort] = None) -> None:
        self.client = client
        self.state = InsightState.IDLE
        self.text = ""

    @property
    def is_pending(self) -> bool:
        return self.state is InsightState.PENDING

    async def request(self, connections: Sequence[ContactRecord]) -> Optional[str]:
        if self.is_pending:
            raise InsightRequestPending("An insight request is already in flight")
        if not connections:
            return None

        self.state = InsightState.PENDING
        worker = asyncio.ensure_future(
            asyncio.to_thread(fetch_network_insights, list(connections), self.client)
        )
        try:
            text = await asyncio.shield(worker)
        except asyncio.CancelledError:
            # The thread cannot be interrupted; the slot frees up once it returns
            if worker.done():
                self._abandon(worker)
            else:
                worker.add_done_callback(self._abandon)
            raise
        except Exception:
            logger.exception("AI insights request failed", extra={"status": "error"})
            self.state = InsightState.FAILURE
            self.text = FAILURE_MESSAGE
            return self.text

        self.state = InsightState.SUCCESS
        self.text = text
        return text

    def _abandon(self, worker: "asyncio.Future[str]") -> None:
        if not worker.cancelled() and worker.exception() is not None:
            logger.debug("Discarded failure of a cancelled insight request: %s", worker.exception())
        self.state = InsightState.IDLE

    def reset(self) -> None:
        if self.is_pending:
            raise InsightRequestPending("Cannot reset while a request is in flight")
        self.state = InsightState.IDLE
        self.text = ""
