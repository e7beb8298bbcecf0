# app_index.py - 应用索引（名称 -> 启动目标）
import os
import logging
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Set
from dataclasses import dataclass
from enum import Enum

from agent_app_launcher.rwlock import ReadWriteLock

logger = logging.getLogger(__name__)

SHORTCUT_EXTENSION = ".lnk"
EXECUTABLE_EXTENSION = ".exe"


class EntryKind(Enum):
    """启动目标类型枚举"""
    EXECUTABLE = "executable"
    FOLDER = "folder"
    SHORTCUT = "shortcut"
    CONTROL_PANEL_COMMAND = "control_panel_command"


def normalize_key(name: str) -> str:
    """索引键不区分大小写"""
    return name.strip().lower()


def guess_kind(target: str) -> EntryKind:
    """根据目标路径推断类型"""
    if target.lower().endswith(SHORTCUT_EXTENSION):
        return EntryKind.SHORTCUT
    if os.path.isdir(target):
        return EntryKind.FOLDER
    return EntryKind.EXECUTABLE


@dataclass
class IndexEntry:
    """索引条目数据类"""
    display_name: str
    target: str
    kind: EntryKind = EntryKind.EXECUTABLE
    source: str = "unknown"

    @property
    def key(self) -> str:
        return normalize_key(self.display_name)


def merge_entries(batches: Iterable[Iterable[IndexEntry]]) -> Dict[str, IndexEntry]:
    """按顺序合并各扫描器结果，同名后写覆盖先写

    batches 的顺序即优先级顺序：越靠后的来源越具体，覆盖越靠前的来源。
    """
    merged: Dict[str, IndexEntry] = {}

    for batch in batches:
        for entry in batch:
            if not entry.display_name or not entry.display_name.strip() or not entry.target:
                continue

            key = entry.key
            previous = merged.get(key)
            if previous is not None and previous.target != entry.target:
                logger.debug(f"索引覆盖 {entry.display_name}: {previous.target} ({previous.source}) "
                             f"-> {entry.target} ({entry.source})")
            merged[key] = entry

    return merged


class AppIndex:
    """应用索引，附带别名表与控制面板命令表，读写均受读写锁保护"""

    def __init__(self, entries: Optional[Iterable[IndexEntry]] = None,
                 aliases: Optional[Mapping[str, Iterable[str]]] = None,
                 control_panel: Optional[Mapping[str, str]] = None):
        self._lock = ReadWriteLock()
        self._entries: Dict[str, IndexEntry] = {}
        self._aliases: Dict[str, Set[str]] = {}
        self._control_panel: Dict[str, IndexEntry] = {}

        if entries:
            self.merge(merge_entries([entries]))
        if aliases:
            for canonical, names in aliases.items():
                self.add_aliases(canonical, names)
        if control_panel:
            self.set_control_panel(control_panel)

    # ---- 写操作 ----

    def merge(self, merged: Mapping[str, IndexEntry]) -> None:
        """批量写入已合并好的条目"""
        with self._lock.write_locked():
            for key, entry in merged.items():
                self._entries[key] = entry

    def put(self, entry: IndexEntry) -> None:
        """写入单个条目（缓存或手动映射）"""
        with self._lock.write_locked():
            self._entries[entry.key] = entry

    def remove(self, name: str) -> bool:
        with self._lock.write_locked():
            return self._entries.pop(normalize_key(name), None) is not None

    def add_aliases(self, canonical: str, names: Iterable[str]) -> None:
        with self._lock.write_locked():
            alias_set = self._aliases.setdefault(canonical, set())
            alias_set.update(normalize_key(n) for n in names if n and n.strip())

    def set_control_panel(self, commands: Mapping[str, str]) -> None:
        with self._lock.write_locked():
            for name, command in commands.items():
                self._control_panel[normalize_key(name)] = IndexEntry(
                    display_name=name,
                    target=command,
                    kind=EntryKind.CONTROL_PANEL_COMMAND,
                    source="control_panel",
                )

    # ---- 读操作 ----

    def get(self, name: str) -> Optional[IndexEntry]:
        with self._lock.read_locked():
            return self._entries.get(normalize_key(name))

    def get_control_panel(self, name: str) -> Optional[IndexEntry]:
        with self._lock.read_locked():
            return self._control_panel.get(normalize_key(name))

    def find_canonical(self, alias: str) -> Optional[str]:
        """反查别名所属的规范名称，多个别名集重叠时取第一个"""
        key = normalize_key(alias)
        with self._lock.read_locked():
            for canonical, alias_set in self._aliases.items():
                if key in alias_set:
                    return canonical
        return None

    def find_containing(self, fragment: str) -> List[IndexEntry]:
        """返回键中包含 fragment 的所有条目，保持索引迭代顺序"""
        key = normalize_key(fragment)
        if not key:
            return []
        with self._lock.read_locked():
            return [entry for k, entry in self._entries.items() if key in k]

    def entries(self) -> List[IndexEntry]:
        with self._lock.read_locked():
            return list(self._entries.values())

    def snapshot(self) -> Mapping[str, str]:
        """只读视图：显示名称 -> 目标"""
        with self._lock.read_locked():
            return MappingProxyType({e.display_name: e.target for e in self._entries.values()})

    def aliases(self) -> Dict[str, Set[str]]:
        with self._lock.read_locked():
            return {canonical: set(names) for canonical, names in self._aliases.items()}

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._entries)
