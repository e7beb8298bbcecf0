# live_search.py - 索引未命中时的实时文件搜索
import os
import glob
import time
import fnmatch
import logging
import threading
from typing import Dict, List, Optional

from agent_app_launcher.app_catalog import LIVE_SEARCH_SUBDIRS, LIVE_SEARCH_VENDOR_PATTERNS
from agent_app_launcher.app_index import EXECUTABLE_EXTENSION
from agent_app_launcher.platform_utils import PlatformUtils, get_platform_utils, iter_files

logger = logging.getLogger(__name__)


class LiveFileSearcher:
    """在所有就绪盘符的用户应用数据目录中按文件名模式搜索可执行文件"""

    def __init__(self, platform_utils: Optional[PlatformUtils] = None,
                 subdirs: Optional[List[str]] = None,
                 vendor_patterns: Optional[Dict[str, List[str]]] = None,
                 max_depth: int = 5, timeout: float = 10):
        self.platform = platform_utils or get_platform_utils()
        self.subdirs = subdirs if subdirs is not None else LIVE_SEARCH_SUBDIRS
        self.vendor_patterns = vendor_patterns if vendor_patterns is not None else LIVE_SEARCH_VENDOR_PATTERNS
        self.max_depth = max_depth
        self.timeout = timeout

    def search_roots(self) -> List[str]:
        user = self.platform.get_user_name()
        roots = []
        for drive in self.platform.get_ready_drives():
            for subdir in self.subdirs:
                path = os.path.join(drive, subdir.format(user=user))
                if path not in roots and os.path.isdir(path):
                    roots.append(path)
        return roots

    def build_patterns(self, name: str) -> List[str]:
        """精确名、通配包裹名、小写变体以及厂商固定模式"""
        escaped = glob.escape(name.strip())
        patterns = [
            f"{escaped}{EXECUTABLE_EXTENSION}",
            f"*{escaped}*{EXECUTABLE_EXTENSION}",
            f"{escaped.lower()}{EXECUTABLE_EXTENSION}",
            f"*{escaped.lower()}*{EXECUTABLE_EXTENSION}",
        ]
        patterns.extend(self.vendor_patterns.get(name.strip().lower(), []))

        unique = []
        for pattern in patterns:
            if pattern not in unique:
                unique.append(pattern)
        return unique

    def find_candidates(self, name: str, cancel_event: Optional[threading.Event] = None) -> List[str]:
        """按遍历顺序返回不重复的匹配路径；超时或取消时返回已找到的部分"""
        if not name or not name.strip():
            return []

        patterns = [p.lower() for p in self.build_patterns(name)]
        deadline = time.monotonic() + self.timeout if self.timeout else None

        def should_stop() -> bool:
            if cancel_event is not None and cancel_event.is_set():
                return True
            return deadline is not None and time.monotonic() > deadline

        found = []
        seen = set()
        for root in self.search_roots():
            logger.debug(f"实时搜索 {name} 于 {root}")
            for dirpath, filename in iter_files(root, self.max_depth, should_stop):
                lowered = filename.lower()
                if not lowered.endswith(EXECUTABLE_EXTENSION):
                    continue
                if not any(fnmatch.fnmatchcase(lowered, pattern) for pattern in patterns):
                    continue
                path = os.path.join(dirpath, filename)
                # 嵌套的搜索目录会再次遍历同一文件
                key = os.path.normcase(path)
                if key not in seen:
                    seen.add(key)
                    found.append(path)
            if should_stop():
                logger.info(f"⏱️ 实时搜索 {name} 已超时或被取消，已找到 {len(found)} 个候选")
                break
        return found

    def search(self, name: str, cancel_event: Optional[threading.Event] = None) -> Optional[str]:
        """返回文件名最短的匹配项；超时或取消时返回已找到结果中的最佳项"""
        found = self.find_candidates(name, cancel_event)
        if not found:
            return None

        best = min(found, key=lambda path: len(os.path.basename(path)))
        logger.info(f"🔎 实时搜索找到 {name}: {best} (候选 {len(found)} 个)")
        return best
