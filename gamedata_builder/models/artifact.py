from __future__ import annotations

from dataclasses import dataclass

"""ConvertedArtifact model: one encoded output file held in memory."""

__all__ = [
    "ConvertedArtifact",
]


@dataclass(frozen=True)
class ConvertedArtifact:
    """Output of one encoder for one table."""
    file_name: str  # 出力ファイル名 (例: items.json)
    content: bytes
    format: str  # json / php / fbs

    @property
    def size(self) -> int:
        return len(self.content)
