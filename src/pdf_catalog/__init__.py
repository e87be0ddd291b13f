"""pdf-catalog：依首頁外觀分群相似 PDF 文件。"""

__version__ = "0.3.0"
