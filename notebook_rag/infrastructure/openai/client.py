from dataclasses import dataclass
from importlib import import_module
from typing import Any


@dataclass(frozen=True)
class OpenAIConfig:
    api_key: str
    base_url: str | None = None  # None = api.openai.com
    timeout_s: float = 120.0


def build_async_client(cfg: OpenAIConfig) -> Any:
    """Create an openai.AsyncOpenAI client (import deferred so tests need no SDK)."""
    module = import_module("openai")
    kwargs: dict[str, Any] = {"api_key": cfg.api_key, "timeout": cfg.timeout_s}
    if cfg.base_url:
        kwargs["base_url"] = cfg.base_url
    return module.AsyncOpenAI(**kwargs)
