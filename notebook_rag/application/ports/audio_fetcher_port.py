from typing import Protocol, runtime_checkable


@runtime_checkable
class AudioFetcherPort(Protocol):
    """Downloads the audio track behind a URL and returns the local file path.

    The caller owns the returned file and is responsible for deleting it.
    """

    async def fetch(self, url: str) -> str: ...
