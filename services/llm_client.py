from __future__ import annotations

import time
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

from config.llm_routes import ROUTES
from config.settings import get_settings
from utils.llm_logger import log_call, sha256_text


def _usage_dict(resp: Any) -> Optional[Dict[str, Any]]:
    usage = getattr(resp, "usage", None)
    if not usage:
        return None
    return {
        "prompt_tokens": getattr(usage, "prompt_tokens", None),
        "completion_tokens": getattr(usage, "completion_tokens", None),
        "total_tokens": getattr(usage, "total_tokens", None),
    }


class LLMClient:
    """Minimal wrapper to centralize per-use-case routing and logging."""

    def __init__(self) -> None:
        self.settings = get_settings()

    def chat(self, *, use_case: str, messages: List[Dict[str, str]], temperature: Optional[float] = None, prompt_name: Optional[str] = None, prompt_text: Optional[str] = None) -> Any:
        route = ROUTES.get(use_case, {})
        provider = route.get("provider", "openai")
        model = route.get("model") or self.settings.openai_model or "gpt-4o-mini"
        op = route.get("operation", "chat")
        temp = temperature if temperature is not None else route.get("temperature")

        if provider != "openai":
            raise NotImplementedError(f"Provider not implemented: {provider}")

        from openai import OpenAI
        client = OpenAI(api_key=self.settings.openai_api_key)

        kwargs: Dict[str, Any] = {"model": model, "messages": messages}
        # Only pass temperature if set (some models only accept the default)
        if temp is not None:
            kwargs["temperature"] = temp

        t0 = time.time()
        try:
            resp = client.chat.completions.create(**kwargs)
        except Exception as e:
            log_call(
                caller=f"llm_client.chat:{use_case}",
                provider=provider,
                model=model,
                operation=op,
                prompt_name=prompt_name,
                prompt_hash=sha256_text(prompt_text),
                duration_ms=int((time.time() - t0) * 1000),
                status="error",
                error=str(e),
            )
            raise

        log_call(
            caller=f"llm_client.chat:{use_case}",
            provider=provider,
            model=model,
            operation=op,
            prompt_name=prompt_name,
            prompt_hash=sha256_text(prompt_text),
            duration_ms=int((time.time() - t0) * 1000),
            status="ok",
            usage=_usage_dict(resp),
        )
        return resp


class StubLLMClient:
    """Offline client returning a canned completion; only allowed with RUN_ENV=test."""

    def __init__(self, text: str = "Stub insights: your network is concentrated in a few employers.") -> None:
        self.text = text
        self.calls: List[Dict[str, Any]] = []

    def chat(self, *, use_case: str, messages: List[Dict[str, str]], temperature: Optional[float] = None, prompt_name: Optional[str] = None, prompt_text: Optional[str] = None) -> Any:
        self.calls.append({"use_case": use_case, "messages": messages})
        log_call(
            caller=f"llm_client.stub:{use_case}",
            provider="stub",
            model=None,
            operation=ROUTES.get(use_case, {}).get("operation", "chat"),
            prompt_name=prompt_name,
            prompt_hash=sha256_text(prompt_text),
            duration_ms=0,
        )
        message = SimpleNamespace(content=self.text)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=None)


def get_llm_client() -> Any:
    """Pick the client from settings.ai_provider (openai or stub)."""
    settings = get_settings()
    provider = (settings.ai_provider or "stub").lower()
    if provider == "openai":
        if not settings.ai_enabled:
            raise RuntimeError("AI insights are disabled; set AI_ENABLED=true")
        return LLMClient()
    if provider == "stub":
        if (settings.run_env or "").lower() != "test":
            raise RuntimeError("Stub LLM provider is only allowed when RUN_ENV=test")
        return StubLLMClient()
    raise NotImplementedError(f"Provider not implemented: {provider}")
