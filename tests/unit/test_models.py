from pathlib import Path

from pdf_catalog.models import (
    DocumentMeta,
    FingerprintResult,
    HashEntry,
    ProgressEvent,
    ProgressEventType,
)


def test_document_meta_from_path(tmp_path: Path) -> None:
    path = tmp_path / "a.pdf"
    path.write_bytes(b"%PDF-1.4")

    meta = DocumentMeta.from_path(path)

    assert meta.path == path
    assert meta.size_bytes == 8
    assert meta.modified_at == path.stat().st_mtime_ns / 1_000_000
    assert meta.to_dict()["path"] == str(path)


def test_hash_entry_from_meta_keeps_validity() -> None:
    meta = DocumentMeta(path=Path("a.pdf"), modified_at=1.5, size_bytes=10)

    entry = HashEntry.from_meta(meta, FingerprintResult.invalid())

    assert entry.fingerprint == 0
    assert entry.valid is False
    assert entry.fingerprint_hex == "0000000000000000"
    assert entry.to_dict()["valid"] is False


def test_progress_event_fraction() -> None:
    event = ProgressEvent(
        event_type=ProgressEventType.FILE_DONE,
        phase_name="Hashing",
        op_id=1,
        processed=3,
        total=12,
    )
    assert event.fraction == 0.25
    empty = ProgressEvent(event_type=ProgressEventType.PHASE_END, phase_name="Hashing", op_id=1)
    assert empty.fraction == 1.0
