from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, cast

from notebook_rag.application.ports.llm_port import ChatMessage, LLMPort, LLMResponse
from notebook_rag.domain.errors import LLMError
from notebook_rag.infrastructure.openai.client import OpenAIConfig, build_async_client


@dataclass
class OpenAIChatAdapter(LLMPort):
    """Chat completions against OpenAI or any OpenAI-compatible server (vLLM, ...)."""

    cfg: OpenAIConfig
    model: str = "gpt-4o-mini"
    _client: Any | None = field(default=None, init=False, repr=False)

    async def chat(
        self,
        messages: Sequence[ChatMessage],
        temperature: float = 0.2,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        try:
            if self._client is None:
                if not self.cfg.api_key:
                    raise LLMError("Missing OpenAI API key. Set OPENAI_API_KEY in env/.env.")
                self._client = build_async_client(self.cfg)
            payload: Any = [{"role": m.role, "content": m.content} for m in messages]
            kwargs: dict[str, Any] = {
                "model": self.model,
                "messages": cast(Any, payload),
                "temperature": temperature,
            }
            if max_tokens is not None:
                kwargs["max_tokens"] = max_tokens
            resp: Any = await self._client.chat.completions.create(**kwargs)
            if not resp.choices:
                return LLMResponse(text="", finish_reason="empty")
            choice = resp.choices[0]
            usage = getattr(resp, "usage", None)
            return LLMResponse(
                text=(choice.message.content or "").strip(),
                finish_reason=choice.finish_reason or "stop",
                usage_tokens=getattr(usage, "total_tokens", None),
            )
        except LLMError:
            raise
        except Exception as ex:  # noqa: BLE001
            # Translate external errors to domain-specific errors
            raise LLMError(f"LLM communication failed: {ex}") from ex
