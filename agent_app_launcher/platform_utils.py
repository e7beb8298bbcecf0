# platform_utils.py - Windows 目录与盘符工具函数
import os
import getpass
import logging
from typing import Callable, Iterator, List, Optional, Tuple
from pathlib import Path

import psutil

logger = logging.getLogger(__name__)

USER_SHELL_FOLDERS_KEY = r"SOFTWARE\Microsoft\Windows\CurrentVersion\Explorer\User Shell Folders"
SHELL_FOLDERS_KEY = r"SOFTWARE\Microsoft\Windows\CurrentVersion\Explorer\Shell Folders"


def load_winreg():
    """延迟导入 winreg，非 Windows 环境返回 None"""
    try:
        import winreg
        return winreg
    except ImportError:
        logger.debug("winreg模块不可用，跳过注册表访问")
        return None


def iter_files(root: str, max_depth: int,
               should_stop: Optional[Callable[[], bool]] = None) -> Iterator[Tuple[str, str]]:
    """按深度遍历目录，产出 (目录, 文件名)；无法访问的子目录直接跳过

    max_depth 为根目录以下最多进入的目录层数，0 表示只看根目录本身。
    """
    root = os.path.normpath(root)
    base_depth = root.rstrip(os.sep).count(os.sep)

    def _on_error(error: OSError) -> None:
        logger.debug(f"跳过无法访问的目录 {getattr(error, 'filename', '')}: {error}")

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        if should_stop is not None and should_stop():
            return
        if dirpath.rstrip(os.sep).count(os.sep) - base_depth >= max_depth:
            dirnames[:] = []
        for filename in filenames:
            yield dirpath, filename


class PlatformUtils:
    """Windows 平台工具类"""

    def __init__(self, registry=None):
        self.registry = registry if registry is not None else load_winreg()
        self.home_dir = Path.home()
        self.config_dirs = self._get_config_dirs()

    def _get_config_dirs(self) -> dict:
        """获取配置目录"""
        system_drive = os.environ.get("SystemDrive", "C:")
        return {
            "app_data": os.environ.get("APPDATA", str(self.home_dir / "AppData" / "Roaming")),
            "local_app_data": os.environ.get("LOCALAPPDATA", str(self.home_dir / "AppData" / "Local")),
            "program_data": os.environ.get("PROGRAMDATA", system_drive + "\\ProgramData"),
            "program_files": os.environ.get("ProgramFiles", system_drive + "\\Program Files"),
            "program_files_x86": os.environ.get("ProgramFiles(x86)", system_drive + "\\Program Files (x86)"),
            "system_root": os.environ.get("SystemRoot", system_drive + "\\Windows"),
            "system_drive": system_drive,
        }

    def read_registry_value(self, hive_name: str, key_path: str, value_name: str) -> Optional[str]:
        """读取单个注册表值，失败返回 None"""
        if self.registry is None:
            return None
        try:
            hive = getattr(self.registry, hive_name)
            with self.registry.OpenKey(hive, key_path) as key:
                value, _ = self.registry.QueryValueEx(key, value_name)
        except (OSError, AttributeError) as e:
            logger.debug(f"读取注册表失败 {hive_name}\\{key_path}\\{value_name}: {e}")
            return None
        if not isinstance(value, str) or not value:
            return None
        return os.path.expandvars(value)

    def get_windows_dir(self) -> str:
        return self.config_dirs["system_root"]

    def get_system_dir(self) -> str:
        return os.path.join(self.config_dirs["system_root"], "System32")

    def get_user_folder(self, shell_folder_name: str, default_subdir: str) -> str:
        """通过 Shell Folders 查询用户文件夹（桌面、文档、下载），查不到时退回用户目录"""
        for key_path in (USER_SHELL_FOLDERS_KEY, SHELL_FOLDERS_KEY):
            path = self.read_registry_value("HKEY_CURRENT_USER", key_path, shell_folder_name)
            if path:
                return path
        return str(self.home_dir / default_subdir)

    def get_start_menu_program_dirs(self) -> List[str]:
        """用户与公共开始菜单 Programs 目录"""
        user_programs = (
            self.read_registry_value("HKEY_CURRENT_USER", SHELL_FOLDERS_KEY, "Programs")
            or os.path.join(self.config_dirs["app_data"], "Microsoft", "Windows", "Start Menu", "Programs")
        )
        common_programs = (
            self.read_registry_value("HKEY_LOCAL_MACHINE", SHELL_FOLDERS_KEY, "Common Programs")
            or os.path.join(self.config_dirs["program_data"], "Microsoft", "Windows", "Start Menu", "Programs")
        )
        return [user_programs, common_programs]

    def get_install_roots(self) -> List[str]:
        """常见安装根目录（去重，仅保留存在的目录）"""
        candidates = [
            self.config_dirs["program_files"],
            self.config_dirs["program_files_x86"],
            os.path.join(self.config_dirs["local_app_data"], "Programs"),
            self.config_dirs["local_app_data"],
            self.config_dirs["app_data"],
            self.config_dirs["program_data"],
        ]
        roots = []
        seen = set()
        for path in candidates:
            key = os.path.normcase(os.path.normpath(path))
            if key in seen:
                continue
            seen.add(key)
            if os.path.isdir(path):
                roots.append(path)
        return roots

    def get_ready_drives(self) -> List[str]:
        """所有已挂载且可访问的盘符根目录"""
        drives = []
        try:
            partitions = psutil.disk_partitions(all=False)
        except OSError as e:
            logger.debug(f"枚举磁盘分区失败: {e}")
            return drives

        for partition in partitions:
            mountpoint = partition.mountpoint
            if "cdrom" in partition.opts and not os.path.exists(mountpoint):
                continue
            if os.path.exists(mountpoint) and mountpoint not in drives:
                drives.append(mountpoint)
        return drives

    def get_secondary_drive_roots(self) -> List[str]:
        """除系统盘以外的盘符根目录"""
        system_drive = os.path.normcase(self.config_dirs["system_drive"].rstrip("\\/"))
        return [d for d in self.get_ready_drives()
                if os.path.normcase(d.rstrip("\\/")) != system_drive]

    def get_user_name(self) -> str:
        return os.environ.get("USERNAME") or getpass.getuser()


# 全局实例
_platform_utils = None


def get_platform_utils() -> PlatformUtils:
    """获取全局平台工具实例"""
    global _platform_utils
    if _platform_utils is None:
        _platform_utils = PlatformUtils()
    return _platform_utils
