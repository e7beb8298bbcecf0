# match_strategies.py - 名称匹配策略
import os
import shutil
import logging
import threading
from typing import Optional

from agent_app_launcher.app_index import (
    EXECUTABLE_EXTENSION, AppIndex, EntryKind, IndexEntry, guess_kind,
)
from agent_app_launcher.live_search import LiveFileSearcher

logger = logging.getLogger(__name__)


class MatchStrategy:
    """匹配策略基类，命中返回索引条目，未命中返回 None"""

    name = "base"
    label = ""

    def match(self, query: str, index: AppIndex,
              cancel_event: Optional[threading.Event] = None) -> Optional[IndexEntry]:
        raise NotImplementedError


class ExactMatch(MatchStrategy):
    name = "exact"
    label = "精确匹配"

    def match(self, query, index, cancel_event=None):
        return index.get(query)


class ControlPanelMatch(MatchStrategy):
    name = "control_panel"
    label = "控制面板"

    def match(self, query, index, cancel_event=None):
        return index.get_control_panel(query)


class AliasMatch(MatchStrategy):
    """别名反查规范名称，再到索引中精确查找"""

    name = "alias"
    label = "别名匹配"

    def match(self, query, index, cancel_event=None):
        canonical = index.find_canonical(query)
        if canonical is None:
            return None
        entry = index.get(canonical)
        if entry is None:
            logger.debug(f"别名 {query} -> {canonical}，但索引中没有 {canonical}")
        return entry


class LiveSearchMatch(MatchStrategy):
    """实时搜索磁盘，命中结果以查询名写回索引作为缓存"""

    name = "live_search"
    label = "实时搜索"

    def __init__(self, searcher: LiveFileSearcher):
        self.searcher = searcher

    def match(self, query, index, cancel_event=None):
        path = self.searcher.search(query, cancel_event)
        if not path:
            return None
        entry = IndexEntry(query.strip(), path, EntryKind.EXECUTABLE, self.name)
        index.put(entry)
        logger.info(f"📝 已缓存实时搜索结果: {entry.display_name} -> {path}")
        return entry


class FuzzyMatch(MatchStrategy):
    """子串包含匹配，多个候选时取最短的键"""

    name = "fuzzy"
    label = "模糊匹配"

    def match(self, query, index, cancel_event=None):
        candidates = index.find_containing(query)
        if not candidates:
            return None
        best = min(candidates, key=lambda entry: len(entry.key))
        if len(candidates) > 1:
            logger.debug(f"模糊匹配 {query} 有 {len(candidates)} 个候选，选择 {best.display_name}")
        return best


class FullPathMatch(MatchStrategy):
    """输入本身就是存在的文件或目录路径，否则交给 PATH 查找（mspaint、regedit 等）"""

    name = "full_path"
    label = "完整路径"

    def match(self, query, index, cancel_event=None):
        raw = query.strip().strip('"')
        path = os.path.expandvars(raw)
        if not path:
            return None

        if os.path.isfile(path) or os.path.isdir(path):
            entry = IndexEntry(path, path, guess_kind(path), self.name)
        else:
            found = shutil.which(raw) or shutil.which(raw + EXECUTABLE_EXTENSION)
            if not found:
                return None
            logger.debug(f"PATH 中找到 {raw}: {found}")
            entry = IndexEntry(raw, found, EntryKind.EXECUTABLE, self.name)

        index.put(entry)
        return entry
