from typing import Protocol, runtime_checkable


@runtime_checkable
class TranscriptionPort(Protocol):
    """Speech-to-text for a local audio file (mp3, wav, m4a, ogg, webm, ...)."""

    async def transcribe(self, audio_path: str) -> str: ...
