"""設定模組。"""

from .manager import ConfigManager
from .preferences import Preferences

__all__ = ["ConfigManager", "Preferences"]
