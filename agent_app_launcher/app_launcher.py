# app_launcher.py - 启动已解析的目标（文件夹、可执行文件、快捷方式、控制面板命令）
import os
import time
import logging
import subprocess
import threading
from typing import Dict, List, Optional
from dataclasses import dataclass
from enum import Enum

from agent_app_launcher.app_index import SHORTCUT_EXTENSION, EntryKind
from agent_app_launcher.shortcut_resolver import ShortcutResolver

logger = logging.getLogger(__name__)


class LaunchResult(Enum):
    """启动结果枚举"""
    SUCCESS = "success"
    NOT_FOUND = "not_found"
    SHORTCUT_UNRESOLVED = "shortcut_unresolved"
    LAUNCH_FAILED = "launch_failed"
    INVALID_TARGET = "invalid_target"


@dataclass
class LaunchStatus:
    """启动状态数据类"""
    result: LaunchResult
    message: str
    app_name: Optional[str] = None
    target: Optional[str] = None
    start_time: Optional[float] = None
    error_details: Optional[str] = None
    launch_method: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.result == LaunchResult.SUCCESS


def _os_error_text(error: Exception) -> str:
    """取出系统错误描述（OSError 与 pywintypes.error 都带 strerror）"""
    return getattr(error, "strerror", None) or str(error)


class AppLauncher:
    """应用启动器 - 所有失败都转换为 LaunchStatus，不向外抛出异常"""

    def __init__(self, shortcut_resolver: Optional[ShortcutResolver] = None, config: Dict = None):
        self.config = config or {"launch_history_limit": 100}
        self.shortcut_resolver = shortcut_resolver or ShortcutResolver()
        self.launch_history: List[Dict] = []
        self._history_lock = threading.Lock()

    def launch(self, target: str, display_name: str, kind: Optional[EntryKind] = None) -> LaunchStatus:
        """启动目标并返回结果"""
        start_time = time.time()
        logger.info(f"🚀 准备启动: {display_name} -> {target}")

        try:
            status = self._launch(target, display_name, kind)
        except Exception as e:
            logger.error(f"启动失败 {display_name}: {e}")
            status = LaunchStatus(
                result=LaunchResult.LAUNCH_FAILED,
                message=f"启动失败: {_os_error_text(e)}",
                app_name=display_name,
                target=target,
                error_details=str(e),
            )

        self._record_launch(status, start_time)
        return status

    def _launch(self, target: str, display_name: str, kind: Optional[EntryKind]) -> LaunchStatus:
        real_target = target

        if target.lower().endswith(SHORTCUT_EXTENSION):
            resolved = self.shortcut_resolver.resolve(target)
            if not resolved or not os.path.exists(resolved):
                return LaunchStatus(
                    result=LaunchResult.SHORTCUT_UNRESOLVED,
                    message=f"无法解析快捷方式: {display_name}",
                    app_name=display_name,
                    target=target,
                    error_details=f"快捷方式: {target}",
                )
            logger.debug(f"快捷方式 {target} -> {resolved}")
            real_target = resolved

        if os.path.isdir(real_target):
            return self._open_folder(real_target, display_name)

        if os.path.isfile(real_target):
            return self._start_file(real_target, display_name)

        if kind == EntryKind.CONTROL_PANEL_COMMAND:
            return self._run_command(real_target, display_name)

        return LaunchStatus(
            result=LaunchResult.INVALID_TARGET,
            message=f"无效的启动目标: {display_name}",
            app_name=display_name,
            target=target,
        )

    def _open_folder(self, path: str, display_name: str) -> LaunchStatus:
        try:
            subprocess.Popen(["explorer.exe", path])
        except OSError as e:
            logger.error(f"打开文件夹失败 {path}: {e}")
            return self._failed(display_name, path, e)

        return LaunchStatus(
            result=LaunchResult.SUCCESS,
            message=f"已打开文件夹: {display_name}",
            app_name=display_name,
            target=path,
            start_time=time.time(),
            launch_method="explorer",
        )

    def _start_file(self, path: str, display_name: str) -> LaunchStatus:
        """按系统文件关联打开，工作目录为文件所在目录"""
        import win32api
        import win32con

        try:
            win32api.ShellExecute(0, "open", path, None, os.path.dirname(path), win32con.SW_SHOWNORMAL)
        except Exception as e:
            logger.error(f"启动文件失败 {path}: {e}")
            return self._failed(display_name, path, e)

        return LaunchStatus(
            result=LaunchResult.SUCCESS,
            message=f"已启动 {display_name}",
            app_name=display_name,
            target=path,
            start_time=time.time(),
            launch_method="shell_execute",
        )

    def _run_command(self, command: str, display_name: str) -> LaunchStatus:
        """控制面板命令：拆成程序与参数后直接启动"""
        import win32api
        import win32con

        parts = command.split()
        program = parts[0]
        arguments = " ".join(parts[1:]) or None

        try:
            win32api.ShellExecute(0, "open", program, arguments, None, win32con.SW_SHOWNORMAL)
        except Exception as e:
            logger.error(f"执行控制面板命令失败 {command}: {e}")
            return self._failed(display_name, command, e)

        return LaunchStatus(
            result=LaunchResult.SUCCESS,
            message=f"已打开 {display_name}",
            app_name=display_name,
            target=command,
            start_time=time.time(),
            launch_method="control_panel",
        )

    @staticmethod
    def _failed(display_name: str, target: str, error: Exception) -> LaunchStatus:
        return LaunchStatus(
            result=LaunchResult.LAUNCH_FAILED,
            message=f"启动失败: {_os_error_text(error)}",
            app_name=display_name,
            target=target,
            error_details=str(error),
        )

    def _record_launch(self, status: LaunchStatus, start_time: float) -> None:
        """记录启动历史"""
        history_entry = {
            "timestamp": time.time(),
            "app_name": status.app_name,
            "target": status.target,
            "result": status.result.value,
            "duration": time.time() - start_time,
            "launch_method": status.launch_method,
        }
        limit = self.config.get("launch_history_limit", 100)
        with self._history_lock:
            self.launch_history.append(history_entry)
            if len(self.launch_history) > limit:
                self.launch_history = self.launch_history[-limit:]

        logger.info(f"启动记录: {status.app_name} -> {status.result.value} "
                    f"(耗时: {history_entry['duration']:.2f}s)")

    def get_launch_history(self, limit: int = 10) -> List[Dict]:
        """获取启动历史的副本"""
        if limit <= 0:
            return []
        with self._history_lock:
            return [dict(h) for h in self.launch_history[-limit:]]

    def get_stats(self) -> Dict:
        """获取启动器统计信息"""
        with self._history_lock:
            results = [h["result"] for h in self.launch_history]
        total_launches = len(results)
        successful_launches = results.count("success")
        return {
            "total_launches": total_launches,
            "successful_launches": successful_launches,
            "success_rate": successful_launches / total_launches if total_launches > 0 else 0,
        }
