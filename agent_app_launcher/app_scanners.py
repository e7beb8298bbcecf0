# app_scanners.py - 索引来源扫描器（预置表、注册表、文件系统、开始菜单快捷方式）
import os
import logging
from typing import Dict, List, Optional

from agent_app_launcher.app_catalog import (
    DRIVE_SUFFIX, KNOWN_APPS, REGISTRY_SUBTREES, SKIP_EXECUTABLE_PREFIXES,
    SYSTEM_UTILITIES, USER_FOLDERS, VENDOR_REGISTRY_KEYS,
)
from agent_app_launcher.app_index import (
    EXECUTABLE_EXTENSION, SHORTCUT_EXTENSION, EntryKind, IndexEntry,
)
from agent_app_launcher.platform_utils import (
    PlatformUtils, get_platform_utils, iter_files, load_winreg,
)
from agent_app_launcher.shortcut_resolver import ShortcutResolver

logger = logging.getLogger(__name__)

SHORTCUT_MAX_DEPTH = 8


def is_auxiliary_executable(filename: str) -> bool:
    """卸载器、更新器等辅助程序"""
    return filename.lower().startswith(SKIP_EXECUTABLE_PREFIXES)


def pick_primary_executable(directory: str) -> Optional[str]:
    """在目录（不递归）中挑选主程序：跳过辅助程序，文件名最短者优先"""
    try:
        names = os.listdir(directory)
    except OSError as e:
        logger.debug(f"列出目录失败 {directory}: {e}")
        return None

    candidates = [
        name for name in names
        if name.lower().endswith(EXECUTABLE_EXTENSION)
        and not is_auxiliary_executable(name)
        and os.path.isfile(os.path.join(directory, name))
    ]
    if not candidates:
        return None
    return os.path.join(directory, min(candidates, key=len))


def extract_executable(command: str) -> Optional[str]:
    """从 shell 命令行中取出可执行文件路径"""
    command = command.strip()
    if not command:
        return None
    if command.startswith('"'):
        end = command.find('"', 1)
        path = command[1:end] if end > 0 else command[1:]
    else:
        lowered = command.lower()
        end = lowered.find(EXECUTABLE_EXTENSION)
        path = command[:end + len(EXECUTABLE_EXTENSION)] if end >= 0 else command.split(' ')[0]
    return os.path.expandvars(path)


class SourceScanner:
    """扫描器基类：scan() 只读取系统状态并返回候选条目，单项失败只记录不抛出"""

    name = "base"

    def __init__(self):
        self.stats = {"entry_count": 0, "error_count": 0}

    def scan(self) -> List[IndexEntry]:
        raise NotImplementedError

    def _record_error(self, message: str) -> None:
        self.stats["error_count"] += 1
        logger.debug(message)

    def _finish(self, entries: List[IndexEntry]) -> List[IndexEntry]:
        self.stats["entry_count"] = len(entries)
        logger.debug(f"{self.name} 扫描到 {len(entries)} 个条目 (错误: {self.stats['error_count']})")
        return entries


class PredefinedScanner(SourceScanner):
    """系统工具、用户文件夹与盘符根目录"""

    name = "predefined"

    def __init__(self, platform_utils: Optional[PlatformUtils] = None):
        super().__init__()
        self.platform = platform_utils or get_platform_utils()

    def scan(self) -> List[IndexEntry]:
        entries = []

        for display_name, exe_name, location in SYSTEM_UTILITIES:
            base_dir = self.platform.get_system_dir() if location == "system" else self.platform.get_windows_dir()
            path = os.path.join(base_dir, exe_name)
            if os.path.isfile(path):
                entries.append(IndexEntry(display_name, path, EntryKind.EXECUTABLE, self.name))
            else:
                self._record_error(f"系统工具不存在: {path}")

        for display_name, shell_folder, default_subdir in USER_FOLDERS:
            path = self.platform.get_user_folder(shell_folder, default_subdir)
            if os.path.isdir(path):
                entries.append(IndexEntry(display_name, path, EntryKind.FOLDER, self.name))
            else:
                self._record_error(f"用户文件夹不存在: {path}")

        for drive in self.platform.get_ready_drives():
            if len(drive) >= 2 and drive[1] == ":" and drive[0].isalpha():
                entries.append(IndexEntry(f"{drive[0].upper()}{DRIVE_SUFFIX}", drive,
                                          EntryKind.FOLDER, self.name))

        return self._finish(entries)


class RegistryScanner(SourceScanner):
    """注册表扫描：App Paths、Uninstall、文件类型处理程序以及厂商专用键"""

    name = "registry"

    def __init__(self, registry=None, subtrees=None, vendor_keys=None):
        super().__init__()
        self.registry = registry
        self.subtrees = subtrees if subtrees is not None else REGISTRY_SUBTREES
        self.vendor_keys = vendor_keys if vendor_keys is not None else VENDOR_REGISTRY_KEYS

    def scan(self) -> List[IndexEntry]:
        if self.registry is None:
            self.registry = load_winreg()
        if self.registry is None:
            logger.warning("winreg模块不可用，跳过注册表扫描")
            return self._finish([])

        entries = []
        for hive_name, key_path, kind in self.subtrees:
            entries.extend(self._scan_subtree(hive_name, key_path, kind))
        entries.extend(self._scan_vendor_keys())
        return self._finish(entries)

    def _scan_subtree(self, hive_name: str, key_path: str, kind: str) -> List[IndexEntry]:
        reg = self.registry
        entries = []

        try:
            key = reg.OpenKey(getattr(reg, hive_name), key_path)
        except Exception as e:
            self._record_error(f"打开注册表键失败 {hive_name}\\{key_path}: {e}")
            return entries

        with key:
            try:
                subkey_count = reg.QueryInfoKey(key)[0]
            except Exception as e:
                self._record_error(f"查询注册表键失败 {hive_name}\\{key_path}: {e}")
                return entries

            for i in range(subkey_count):
                try:
                    subkey_name = reg.EnumKey(key, i)
                    with reg.OpenKey(key, subkey_name) as subkey:
                        entry = self._entry_from_subkey(subkey, subkey_name, kind)
                    if entry:
                        entries.append(entry)
                except Exception as e:
                    self._record_error(f"处理注册表子项失败 {key_path} #{i}: {e}")

        logger.debug(f"从 {hive_name}\\{key_path} 找到 {len(entries)} 个应用")
        return entries

    def _entry_from_subkey(self, subkey, subkey_name: str, kind: str) -> Optional[IndexEntry]:
        display_name = self._query_string(subkey, "DisplayName")
        if kind == "uninstall":
            name = display_name or subkey_name
        else:
            name = os.path.splitext(subkey_name)[0]

        # 1. 默认值即可执行文件路径
        default_value = self._query_string(subkey, "")
        if default_value:
            path = extract_executable(default_value)
            if path and os.path.isfile(path):
                return IndexEntry(name, path, EntryKind.EXECUTABLE, self.name)

        # 2. InstallLocation 下直接存在的可执行文件
        install_location = self._query_string(subkey, "InstallLocation")
        if install_location and display_name:
            install_location = os.path.expandvars(install_location.strip().strip('"'))
            if os.path.isdir(install_location):
                exe_path = pick_primary_executable(install_location)
                if exe_path:
                    return IndexEntry(display_name, exe_path, EntryKind.EXECUTABLE, self.name)

        # 3. 文件类型处理程序的打开命令
        if kind == "handlers":
            try:
                with self.registry.OpenKey(subkey, r"shell\open\command") as command_key:
                    command = self._query_string(command_key, "")
            except OSError:
                command = None
            if command:
                path = extract_executable(command)
                if path and os.path.isfile(path):
                    return IndexEntry(name, path, EntryKind.EXECUTABLE, self.name)

        return None

    def _query_string(self, key, value_name: str) -> Optional[str]:
        try:
            value, _ = self.registry.QueryValueEx(key, value_name)
        except OSError:
            return None
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    def _scan_vendor_keys(self) -> List[IndexEntry]:
        entries = []
        reg = self.registry

        for display_name, hive_name, key_path, value_name, exe_name in self.vendor_keys:
            try:
                with reg.OpenKey(getattr(reg, hive_name), key_path) as key:
                    value = self._query_string(key, value_name)
            except Exception as e:
                self._record_error(f"读取厂商注册表键失败 {key_path}: {e}")
                continue
            if not value:
                continue

            path = os.path.expandvars(value.strip('"'))
            if exe_name:
                path = os.path.join(path, exe_name)
            path = os.path.normpath(path)
            if os.path.isfile(path):
                entries.append(IndexEntry(display_name, path, EntryKind.EXECUTABLE, self.name))

        return entries


class FilesystemScanner(SourceScanner):
    """递归枚举常见安装目录下的可执行文件，并探测常用应用的固定安装位置"""

    name = "filesystem"

    def __init__(self, platform_utils: Optional[PlatformUtils] = None, max_depth: int = 4,
                 scan_secondary_drives: bool = False, secondary_max_depth: int = 2,
                 known_apps=None):
        super().__init__()
        self.platform = platform_utils or get_platform_utils()
        self.max_depth = max_depth
        self.scan_secondary_drives = scan_secondary_drives
        self.secondary_max_depth = secondary_max_depth
        self.known_apps = known_apps if known_apps is not None else KNOWN_APPS

    def scan(self) -> List[IndexEntry]:
        entries = []
        found_by_filename: Dict[str, str] = {}

        roots = [(root, self.max_depth) for root in self.platform.get_install_roots()]
        if self.scan_secondary_drives:
            roots.extend((root, self.secondary_max_depth)
                         for root in self.platform.get_secondary_drive_roots())

        for root, depth in roots:
            logger.debug(f"扫描安装目录: {root} (深度 {depth})")
            for dirpath, filename in iter_files(root, depth):
                if not filename.lower().endswith(EXECUTABLE_EXTENSION) or is_auxiliary_executable(filename):
                    continue
                path = os.path.join(dirpath, filename)
                found_by_filename.setdefault(filename.lower(), path)
                entries.append(IndexEntry(os.path.splitext(filename)[0], path,
                                          EntryKind.EXECUTABLE, self.name))

        install_roots = [root for root, _ in roots]
        for display_name, exe_name, relative_dirs in self.known_apps:
            path = self._locate_known_app(exe_name, relative_dirs, install_roots, found_by_filename)
            if path:
                entries.append(IndexEntry(display_name, path, EntryKind.EXECUTABLE, self.name))

        return self._finish(entries)

    @staticmethod
    def _locate_known_app(exe_name: str, relative_dirs: List[str], roots: List[str],
                          found_by_filename: Dict[str, str]) -> Optional[str]:
        """先查固定相对路径，再退回递归扫描中见过的同名文件"""
        for root in roots:
            for relative_dir in relative_dirs:
                candidate = os.path.join(root, relative_dir, exe_name)
                if os.path.isfile(candidate):
                    return candidate
        return found_by_filename.get(exe_name.lower())


class ShortcutScanner(SourceScanner):
    """开始菜单快捷方式扫描"""

    name = "shortcut"

    def __init__(self, platform_utils: Optional[PlatformUtils] = None,
                 resolver: Optional[ShortcutResolver] = None):
        super().__init__()
        self.platform = platform_utils or get_platform_utils()
        self.resolver = resolver or ShortcutResolver(self.platform)
        self.stats["unresolved_count"] = 0

    def scan(self) -> List[IndexEntry]:
        entries = []

        for programs_dir in self.platform.get_start_menu_program_dirs():
            if not os.path.isdir(programs_dir):
                self._record_error(f"开始菜单目录不存在: {programs_dir}")
                continue

            for dirpath, filename in iter_files(programs_dir, SHORTCUT_MAX_DEPTH):
                if not filename.lower().endswith(SHORTCUT_EXTENSION):
                    continue
                lnk_path = os.path.join(dirpath, filename)
                target = self.resolver.resolve(lnk_path)
                if not target or not os.path.isfile(target):
                    self.stats["unresolved_count"] += 1
                    logger.debug(f"快捷方式目标不存在，跳过: {lnk_path}")
                    continue

                stem = filename[:-len(SHORTCUT_EXTENSION)]
                entries.append(IndexEntry(stem, lnk_path, EntryKind.SHORTCUT, self.name))
                if stem.lower().endswith(EXECUTABLE_EXTENSION) and len(stem) > len(EXECUTABLE_EXTENSION):
                    entries.append(IndexEntry(stem[:-len(EXECUTABLE_EXTENSION)], lnk_path,
                                              EntryKind.SHORTCUT, self.name))

        return self._finish(entries)


def create_default_scanners(config: Dict, platform_utils: Optional[PlatformUtils] = None,
                            registry=None) -> List[SourceScanner]:
    """按优先级（预置表 < 注册表 < 文件系统 < 快捷方式）创建扫描器"""
    platform = platform_utils or get_platform_utils()
    scanners: List[SourceScanner] = []

    if config.get("scan_predefined", True):
        scanners.append(PredefinedScanner(platform))
    if config.get("scan_registry", True):
        scanners.append(RegistryScanner(registry if registry is not None else platform.registry))
    if config.get("scan_filesystem", True):
        scanners.append(FilesystemScanner(
            platform,
            max_depth=config.get("filesystem_max_depth", 4),
            scan_secondary_drives=config.get("scan_secondary_drives", False),
            secondary_max_depth=config.get("secondary_drive_max_depth", 2),
        ))
    if config.get("scan_shortcuts", True):
        resolver = ShortcutResolver(platform, fallback_max_depth=config.get("shortcut_fallback_max_depth", 3))
        scanners.append(ShortcutScanner(platform, resolver))

    return scanners
