from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class IngestRequest:
    """
    DTO for ingesting heterogeneous sources in one request.

    - pdf_paths:       local PDF files; the caller owns them (they are not deleted)
    - youtube_urls:    video URLs whose audio is downloaded and transcribed
    - raw_texts:       plain text, indexed under source "raw"
    - require_content: raise EmptyContentError instead of returning upserted=0
    """

    pdf_paths: tuple[str, ...] = ()
    youtube_urls: tuple[str, ...] = ()
    raw_texts: tuple[str, ...] = ()
    require_content: bool = False

    def is_empty(self) -> bool:
        return not (self.pdf_paths or self.youtube_urls or self.raw_texts)


@dataclass(frozen=True)
class IngestResult:
    upserted: int
    warnings: list[str] = field(default_factory=list)
