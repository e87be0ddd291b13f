"""Batch coordinator for fingerprinting and thumbnail rendering.

Everything runs on one asyncio loop. Work is interleaved at explicit
suspension points (after every cache access, every rasterization and
between batches); no worker threads are used. Each folder scan is a
:class:`ScanOperation` with a monotonically increasing id. Starting a new
scan cancels the previous operation's token, and a superseded operation
stops at its next suspension point and produces no further output.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from ..config import ConfigManager, Preferences
from ..models import (
    DocumentMeta,
    FingerprintResult,
    HashEntry,
    PageLayout,
    ProgressEvent,
    ProgressEventType,
    ScanResult,
)
from ..utils.cancel import OperationTracker, ScanOperation
from ..utils.error_handler import (
    CACHE_CLEAR_FAILED,
    FINGERPRINT_FAILED,
    THUMBNAIL_FAILED,
    ErrorHandler,
)
from ..utils.logger import get_logger
from ..utils.rasterizer import Rasterizer
from .fingerprint import FingerprintComputer
from .fingerprint_cache import FingerprintCache
from .scanner import DocumentScanner
from .similarity import DEFAULT_THRESHOLD, SimilarityGrouper, sort_entries

ProgressCallback = Callable[[ProgressEvent], None]
ThumbnailCallback = Callable[[Path, str], None]

HASH_PHASE = "Hashing"
THUMBNAIL_PHASE = "Thumbnails"


async def cooperative_yield() -> None:
    await asyncio.sleep(0)


class BatchOrchestrator:
    def __init__(
        self,
        cache: FingerprintCache,
        rasterizer: Rasterizer,
        config: Optional[ConfigManager] = None,
        computer: Optional[FingerprintComputer] = None,
        scanner: Optional[DocumentScanner] = None,
        preferences: Optional[Preferences] = None,
        logger=None,
    ) -> None:
        self.config = config or ConfigManager()
        self.logger = logger or get_logger(self.__class__.__name__)
        self.cache = cache
        self.rasterizer = rasterizer
        self.computer = computer or FingerprintComputer(self.logger)
        self.scanner = scanner or DocumentScanner(self.config, self.logger)
        self.preferences = preferences
        self.grouper = SimilarityGrouper(preferences.get_threshold() if preferences else DEFAULT_THRESHOLD)
        self.tracker = OperationTracker()
        self.errors = ErrorHandler()

        self.hash_batch_size = int(self.config.get("hashing.batch_size", 12))
        self.raster_size = int(self.config.get("hashing.raster_size", 64))
        self.thumbnail_concurrency = int(self.config.get("thumbnail.concurrency", 4))
        self.thumbnail_max_width = int(self.config.get("thumbnail.max_width", 180))
        self.thumbnail_max_height = int(self.config.get("thumbnail.max_height", 240))

        self._meta_map: dict[Path, DocumentMeta] = {}

    def begin_operation(self) -> ScanOperation:
        operation = self.tracker.begin()
        self.errors = ErrorHandler()
        self.logger.debug(f"開始作業 #{operation.op_id}")
        return operation

    def is_current(self, operation: ScanOperation) -> bool:
        return self.tracker.is_current(operation)

    def _resolve_operation(self, operation: Optional[ScanOperation]) -> ScanOperation:
        if operation is not None:
            return operation
        return self.tracker.current or self.begin_operation()

    def _abandon(self, operation: ScanOperation, phase: str) -> None:
        self.logger.debug(f"作業 #{operation.op_id} 已被取代，停止 {phase}")

    def _emit(
        self,
        callback: Optional[ProgressCallback],
        event_type: ProgressEventType,
        phase: str,
        operation: ScanOperation,
        processed: int,
        total: int,
        file_path: Optional[Path] = None,
    ) -> None:
        if callback is None:
            return
        callback(
            ProgressEvent(
                event_type=event_type,
                phase_name=phase,
                op_id=operation.op_id,
                processed=processed,
                total=total,
                file_path=str(file_path) if file_path is not None else None,
            )
        )

    async def _fingerprint(
        self, meta: DocumentMeta, operation: ScanOperation
    ) -> Optional[FingerprintResult]:
        cached = self.cache.get_fingerprint(meta)
        await cooperative_yield()
        if not self.is_current(operation):
            return None
        if cached:
            return FingerprintResult(value=cached, valid=True)

        result = self.computer.fingerprint_document(meta.path, self.rasterizer, self.raster_size)
        await cooperative_yield()
        if not self.is_current(operation):
            return None

        if result.valid:
            self.cache.set_fingerprint(meta, result.value)
        else:
            self.errors.add_warning(FINGERPRINT_FAILED, "無法計算文件指紋", meta.path)
        return result

    async def hash_and_sort(
        self,
        metas: Sequence[DocumentMeta],
        operation: Optional[ScanOperation] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> List[HashEntry]:
        operation = self._resolve_operation(operation)
        total = len(metas)
        if total == 0 or not self.is_current(operation):
            return []

        self._meta_map = {meta.path: meta for meta in metas}
        self._emit(progress_callback, ProgressEventType.PHASE_START, HASH_PHASE, operation, 0, total)

        entries: List[HashEntry] = []
        since_yield = 0
        for meta in metas:
            if not self.is_current(operation):
                self._abandon(operation, HASH_PHASE)
                return []
            result = await self._fingerprint(meta, operation)
            if result is None:
                self._abandon(operation, HASH_PHASE)
                return []
            entries.append(HashEntry.from_meta(meta, result))
            self._emit(
                progress_callback,
                ProgressEventType.FILE_DONE,
                HASH_PHASE,
                operation,
                len(entries),
                total,
                meta.path,
            )
            since_yield += 1
            if since_yield >= self.hash_batch_size:
                since_yield = 0
                await cooperative_yield()

        if not self.is_current(operation):
            self._abandon(operation, HASH_PHASE)
            return []
        self._emit(progress_callback, ProgressEventType.PHASE_END, HASH_PHASE, operation, total, total)
        return sort_entries(entries)

    async def _thumbnail(self, path: Path, operation: ScanOperation) -> Optional[str]:
        if not self.is_current(operation):
            return None
        meta = self._meta_map.get(path)
        if meta is not None:
            cached = self.cache.get_thumbnail(meta)
            await cooperative_yield()
            if not self.is_current(operation):
                return None
            if cached:
                return cached

        try:
            data_url = self.rasterizer.render_thumbnail(
                path, self.thumbnail_max_width, self.thumbnail_max_height
            )
        except Exception as exc:
            self.logger.warning(f"無法產生縮圖: {path} ({exc})")
            data_url = None
        await cooperative_yield()
        if not self.is_current(operation):
            return None

        if data_url is None:
            self.errors.add_warning(THUMBNAIL_FAILED, "無法產生縮圖", path)
            return None
        if meta is not None:
            self.cache.set_thumbnail(meta, data_url)
        return data_url

    async def render_thumbnails(
        self,
        paths: Iterable[Path],
        concurrency: Optional[int] = None,
        operation: Optional[ScanOperation] = None,
        progress_callback: Optional[ProgressCallback] = None,
        on_thumbnail: Optional[ThumbnailCallback] = None,
    ) -> dict[Path, str]:
        operation = self._resolve_operation(operation)
        batch_size = self.thumbnail_concurrency if concurrency is None else concurrency
        if batch_size < 1:
            raise ValueError(f"concurrency must be positive, got {batch_size}")

        path_list = list(paths)
        total = len(path_list)
        thumbnails: dict[Path, str] = {}
        if total == 0 or not self.is_current(operation):
            return thumbnails

        self._emit(progress_callback, ProgressEventType.PHASE_START, THUMBNAIL_PHASE, operation, 0, total)
        done = 0
        for start in range(0, total, batch_size):
            if not self.is_current(operation):
                self._abandon(operation, THUMBNAIL_PHASE)
                return thumbnails
            batch = path_list[start : start + batch_size]
            results = await asyncio.gather(*(self._thumbnail(path, operation) for path in batch))
            if not self.is_current(operation):
                self._abandon(operation, THUMBNAIL_PHASE)
                return thumbnails
            for path, data_url in zip(batch, results):
                done += 1
                if data_url is not None:
                    thumbnails[path] = data_url
                    if on_thumbnail is not None:
                        on_thumbnail(path, data_url)
                self._emit(
                    progress_callback,
                    ProgressEventType.FILE_DONE,
                    THUMBNAIL_PHASE,
                    operation,
                    done,
                    total,
                    path,
                )
            await cooperative_yield()

        self._emit(progress_callback, ProgressEventType.PHASE_END, THUMBNAIL_PHASE, operation, total, total)
        return thumbnails

    async def describe_pages(
        self, paths: Iterable[Path], operation: Optional[ScanOperation] = None
    ) -> dict[Path, PageLayout]:
        """頁數與首頁比例；讀不到的文件使用 rasterizer 的預設值。"""
        operation = self._resolve_operation(operation)
        layouts: dict[Path, PageLayout] = {}
        for path in paths:
            if not self.is_current(operation):
                self._abandon(operation, "版面資訊")
                return layouts
            layouts[path] = PageLayout(
                page_count=self.rasterizer.page_count(path),
                height_over_width=self.rasterizer.first_page_height_over_width_ratio(path),
            )
            await cooperative_yield()
        return layouts

    async def scan_folder(
        self,
        directory: Path,
        threshold: Optional[int] = None,
        *,
        with_thumbnails: bool = True,
        progress_callback: Optional[ProgressCallback] = None,
        on_thumbnail: Optional[ThumbnailCallback] = None,
    ) -> Optional[ScanResult]:
        """掃描資料夾並回傳排序分群結果；被較新的掃描取代時回傳 None。

        ``threshold`` 為 None 時使用偏好設定中保存的值。
        """
        if threshold is None and self.preferences is not None:
            threshold = self.preferences.get_threshold()
        operation = self.begin_operation()
        metas = self.scanner.list_documents(directory)
        await cooperative_yield()
        if not self.is_current(operation):
            return None

        entries = await self.hash_and_sort(metas, operation, progress_callback)
        if not self.is_current(operation):
            return None
        groups = self.grouper.sort_and_group(entries, threshold)

        thumbnails: dict[Path, str] = {}
        if with_thumbnails:
            thumbnails = await self.render_thumbnails(
                [entry.path for entry in self.grouper.sorted_entries],
                operation=operation,
                progress_callback=progress_callback,
                on_thumbnail=on_thumbnail,
            )
            if not self.is_current(operation):
                return None

        layouts = await self.describe_pages(
            [entry.path for entry in self.grouper.sorted_entries], operation
        )
        if not self.is_current(operation):
            return None

        self.logger.info(f"掃描完成: {directory}，共 {len(entries)} 份文件，{len(groups)} 組")
        return ScanResult(
            op_id=operation.op_id,
            directory=directory,
            entries=list(self.grouper.sorted_entries),
            groups=groups,
            threshold=self.grouper.threshold,
            thumbnails=thumbnails,
            layouts=layouts,
            errors=list(self.errors.errors),
        )

    async def clear_cache_and_rescan(
        self, directory: Optional[Path], threshold: Optional[int] = None, **kwargs
    ) -> Optional[ScanResult]:
        cleared = self.cache.clear()
        self._meta_map = {}
        if directory is None:
            self.begin_operation()
            return None
        result = await self.scan_folder(directory, threshold, **kwargs)
        if result is not None and not cleared:
            self.errors.add_warning(CACHE_CLEAR_FAILED, "無法清除快取", self.cache.cache_dir)
            result.errors = list(self.errors.errors)
        return result

    def regroup(self, threshold: int) -> List[List[HashEntry]]:
        return self.grouper.regroup(threshold)
