import asyncio
import os

import pytest

from notebook_rag.domain.errors import ExtractionError
from notebook_rag.infrastructure.audio.yt_dlp_fetcher import YtDlpAudioFetcher


class FakeProc:
    def __init__(self, stdout=b"", stderr=b"", returncode=0, hang=False, on_run=None):
        self._stdout = stdout
        self._stderr = stderr
        self.returncode = returncode
        self.hang = hang
        self.on_run = on_run
        self.killed = False

    async def communicate(self):
        if self.hang:
            await asyncio.sleep(10)
        if self.on_run:
            self.on_run()
        return self._stdout, self._stderr

    def kill(self):
        self.killed = True

    async def wait(self):
        return self.returncode


@pytest.mark.asyncio
async def test_fetch_resolves_id_and_downloads_mp3(tmp_path, monkeypatch):
    calls: list[tuple] = []
    out_dir = tmp_path / "audio"

    def _touch():
        template = calls[-1][calls[-1].index("-o") + 1]
        with open(template.replace("%(ext)s", "mp3"), "wb") as fh:
            fh.write(b"ID3")

    procs = [FakeProc(stdout=b"abc123\n"), FakeProc(on_run=_touch)]

    async def fake_exec(*args, **kwargs):
        calls.append(args)
        return procs.pop(0)

    monkeypatch.setattr(asyncio, "create_subprocess_exec", fake_exec)
    fetcher = YtDlpAudioFetcher(output_dir=str(out_dir), binary="yt-dlp")

    path = await fetcher.fetch("https://youtu.be/abc123")

    assert os.path.dirname(path) == str(out_dir)
    assert os.path.basename(path).startswith("abc123-")
    assert path.endswith(".mp3") and os.path.exists(path)
    assert calls[0][:3] == ("yt-dlp", "--print", "%(id)s")
    download = calls[1]
    assert "worstaudio/worst" in download
    assert "-ar 16000 -ac 1" in download
    assert path.replace(".mp3", ".%(ext)s") in download


@pytest.mark.asyncio
async def test_nonzero_exit_is_an_extraction_error(tmp_path, monkeypatch):
    async def fake_exec(*args, **kwargs):
        return FakeProc(stderr=b"ERROR: Video unavailable\n", returncode=1)

    monkeypatch.setattr(asyncio, "create_subprocess_exec", fake_exec)
    with pytest.raises(ExtractionError, match="Video unavailable"):
        await YtDlpAudioFetcher(output_dir=str(tmp_path)).fetch("https://youtu.be/gone")


@pytest.mark.asyncio
async def test_timeout_kills_the_process(tmp_path, monkeypatch):
    proc = FakeProc(hang=True)

    async def fake_exec(*args, **kwargs):
        return proc

    monkeypatch.setattr(asyncio, "create_subprocess_exec", fake_exec)
    fetcher = YtDlpAudioFetcher(output_dir=str(tmp_path), timeout_s=0.01)

    with pytest.raises(ExtractionError, match="timed out"):
        await fetcher.fetch("https://youtu.be/slow")
    assert proc.killed


@pytest.mark.asyncio
async def test_missing_binary_is_an_extraction_error(tmp_path, monkeypatch):
    async def fake_exec(*args, **kwargs):
        raise FileNotFoundError("yt-dlp")

    monkeypatch.setattr(asyncio, "create_subprocess_exec", fake_exec)
    with pytest.raises(ExtractionError, match="could not start"):
        await YtDlpAudioFetcher(output_dir=str(tmp_path)).fetch("https://youtu.be/x")


@pytest.mark.asyncio
async def test_same_url_fetched_twice_gets_separate_files(tmp_path, monkeypatch):
    def _touch(args):
        template = args[args.index("-o") + 1]
        with open(template.replace("%(ext)s", "mp3"), "wb") as fh:
            fh.write(b"ID3")

    async def fake_exec(*args, **kwargs):
        if "--print" in args:
            return FakeProc(stdout=b"vid123\n")
        return FakeProc(on_run=lambda: _touch(args))

    monkeypatch.setattr(asyncio, "create_subprocess_exec", fake_exec)
    fetcher = YtDlpAudioFetcher(output_dir=str(tmp_path))

    first, second = await asyncio.gather(
        fetcher.fetch("https://youtu.be/vid123"), fetcher.fetch("https://youtu.be/vid123")
    )

    assert first != second
    os.remove(first)
    assert os.path.exists(second)


@pytest.mark.asyncio
async def test_cancelled_fetch_kills_the_process(tmp_path, monkeypatch):
    proc = FakeProc(hang=True)

    async def fake_exec(*args, **kwargs):
        return proc

    monkeypatch.setattr(asyncio, "create_subprocess_exec", fake_exec)
    task = asyncio.create_task(YtDlpAudioFetcher(output_dir=str(tmp_path)).fetch("https://youtu.be/x"))
    await asyncio.sleep(0.01)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert proc.killed
