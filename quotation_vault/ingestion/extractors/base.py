from __future__ import annotations

import re
from abc import ABC, abstractmethod

from quotation_vault.ingestion.types import ExtractResult, SelectedFile

_BLANK_RUN = re.compile(r"\n{4,}")


class Extractor(ABC):
    """One strategy per media-type family. The router asks each in turn."""

    @abstractmethod
    def can_handle(self, media_type: str) -> bool: ...

    @abstractmethod
    async def extract(self, *, file: SelectedFile) -> ExtractResult: ...


def normalize_text(text: str) -> str:
    """Drop NULs, cap blank-line runs at two, trim the ends."""
    if not text:
        return ""
    text = _BLANK_RUN.sub("\n\n\n", text.replace("\x00", ""))
    return text.strip()
