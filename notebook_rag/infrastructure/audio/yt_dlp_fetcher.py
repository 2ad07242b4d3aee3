"""YouTube audio acquisition through the yt-dlp command line tool.

Why: yt-dlp is an external program, not a library dependency; the adapter
     only builds argv, enforces a timeout and maps failures to ExtractionError.
"""

import asyncio
import contextlib
import logging
import os
import uuid
from dataclasses import dataclass

from notebook_rag.application.ports.audio_fetcher_port import AudioFetcherPort
from notebook_rag.domain.errors import ExtractionError

logger = logging.getLogger(__name__)

MAX_OUTPUT_BYTES = 10 * 1024 * 1024


@dataclass
class YtDlpAudioFetcher(AudioFetcherPort):
    output_dir: str = "var/source-files"
    binary: str = "yt-dlp"
    timeout_s: float = 900.0

    async def fetch(self, url: str) -> str:
        os.makedirs(self.output_dir, exist_ok=True)
        video_id = await self.resolve_video_id(url)
        # eigener Dateiname pro Abruf: gleiche URL parallel darf sich nicht gegenseitig loeschen
        stem = f"{video_id}-{uuid.uuid4().hex[:12]}"
        template = os.path.join(self.output_dir, f"{stem}.%(ext)s")
        logger.info("Downloading audio for %s", url)
        await self._run(self.download_args(url, template))
        out_path = os.path.join(self.output_dir, f"{stem}.mp3")
        if not os.path.exists(out_path):
            raise ExtractionError(f"yt-dlp finished but {out_path} was not created")
        return out_path

    async def resolve_video_id(self, url: str) -> str:
        stdout = await self._run(
            ["--print", "%(id)s", "--no-warnings", "--no-progress", url]
        )
        lines = [line.strip() for line in stdout.strip().splitlines() if line.strip()]
        if not lines:
            raise ExtractionError("Failed to resolve video id via yt-dlp")
        return lines[-1]

    @staticmethod
    def download_args(url: str, output_template: str) -> list[str]:
        # worst audio is enough for speech; 16 kHz mono keeps the upload small
        return [
            "-f",
            "worstaudio/worst",
            "-x",
            "--audio-format",
            "mp3",
            "--postprocessor-args",
            "-ar 16000 -ac 1",
            "--no-continue",
            "--no-part",
            "--no-progress",
            "-o",
            output_template,
            url,
        ]

    async def _run(self, args: list[str]) -> str:
        try:
            proc = await asyncio.create_subprocess_exec(
                self.binary,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                limit=MAX_OUTPUT_BYTES,
            )
        except OSError as ex:
            raise ExtractionError(f"could not start {self.binary}: {ex}") from ex
        try:
            stdout_b, stderr_b = await asyncio.wait_for(proc.communicate(), timeout=self.timeout_s)
        except asyncio.TimeoutError:
            await self._kill(proc)
            raise ExtractionError(f"{self.binary} timed out after {self.timeout_s:.0f}s")
        except asyncio.CancelledError:
            # request aborted elsewhere; no orphaned yt-dlp
            await self._kill(proc)
            raise
        stdout = (stdout_b or b"").decode("utf-8", errors="replace")
        stderr = (stderr_b or b"").decode("utf-8", errors="replace")
        if proc.returncode != 0:
            tail = stderr.strip().splitlines()[-1:] or ["no output"]
            raise ExtractionError(f"{self.binary} exited with {proc.returncode}: {tail[0]}")
        return stdout

    @staticmethod
    async def _kill(proc) -> None:
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
        await proc.wait()
