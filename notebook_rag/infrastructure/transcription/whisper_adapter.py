from dataclasses import dataclass, field
from typing import Any

from notebook_rag.application.ports.transcription_port import TranscriptionPort
from notebook_rag.domain.errors import ExtractionError
from notebook_rag.infrastructure.openai.client import OpenAIConfig, build_async_client


@dataclass
class WhisperTranscriptionAdapter(TranscriptionPort):
    """OpenAI audio transcription (whisper-1, plain text response)."""

    cfg: OpenAIConfig
    model: str = "whisper-1"
    _client: Any | None = field(default=None, init=False, repr=False)

    async def transcribe(self, audio_path: str) -> str:
        try:
            if self._client is None:
                if not self.cfg.api_key:
                    raise ExtractionError("Missing OpenAI API key. Set OPENAI_API_KEY in env/.env.")
                self._client = build_async_client(self.cfg)
            with open(audio_path, "rb") as fh:
                resp: Any = await self._client.audio.transcriptions.create(
                    model=self.model,
                    file=fh,
                    response_format="text",
                )
        except ExtractionError:
            raise
        except Exception as ex:  # noqa: BLE001
            raise ExtractionError(f"Transcription failed for '{audio_path}': {ex}") from ex
        # Depending on SDK version the text format comes back as str or as an object
        if isinstance(resp, str):
            return resp
        return str(getattr(resp, "text", "") or "")
