from __future__ import annotations

import os


# Central routing for LLM use-cases. Edit here to change per-operation defaults.
# Per-route model can be overridden via env vars for quick testing.
#
# Keys are use_case identifiers consumed by services/llm_client.py
ROUTES: dict[str, dict] = {
    # Narrative network insights from a connections export
    "network_insights": {
        "provider": os.getenv("LLM_INSIGHTS_PROVIDER", "openai"),
        "model": os.getenv("OPENAI_MODEL_INSIGHTS"),  # falls back to global OPENAI_MODEL
        "temperature": 0.7,
        # Logical operation name for logging (not a vendor API name)
        "operation": "network_insights",
    },
}
