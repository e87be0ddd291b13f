"""排序與分群用的指紋項目。"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .document_meta import DocumentMeta


@dataclass(frozen=True)
class FingerprintResult:
    value: int
    valid: bool

    @classmethod
    def invalid(cls) -> "FingerprintResult":
        return cls(value=0, valid=False)


@dataclass(frozen=True)
class HashEntry:
    path: Path
    fingerprint: int
    size_bytes: int
    modified_at: float
    valid: bool = True

    @classmethod
    def from_meta(cls, meta: DocumentMeta, result: FingerprintResult) -> "HashEntry":
        return cls(
            path=meta.path,
            fingerprint=result.value,
            size_bytes=meta.size_bytes,
            modified_at=meta.modified_at,
            valid=result.valid,
        )

    @property
    def fingerprint_hex(self) -> str:
        return f"{self.fingerprint:016x}"

    def to_dict(self) -> dict[str, object]:
        return {
            "path": str(self.path),
            "fingerprint": self.fingerprint_hex,
            "size_bytes": self.size_bytes,
            "modified_at": self.modified_at,
            "valid": self.valid,
        }
