"""文件首頁版面資訊，供縮圖排版與清單顯示使用。"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PageLayout:
    page_count: int
    height_over_width: float

    def to_dict(self) -> dict[str, object]:
        return {"page_count": self.page_count, "height_over_width": self.height_over_width}
