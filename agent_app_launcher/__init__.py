# agent_app_launcher - 应用与资源解析启动引擎
from agent_app_launcher.app_index import AppIndex, EntryKind, IndexEntry, merge_entries
from agent_app_launcher.app_launcher import AppLauncher, LaunchResult, LaunchStatus
from agent_app_launcher.app_resolver import AppResolver, ResolveResult
from agent_app_launcher.launcher_service import AppLauncherService, create_app_launcher_service

__all__ = [
    "AppIndex", "EntryKind", "IndexEntry", "merge_entries",
    "AppLauncher", "LaunchResult", "LaunchStatus",
    "AppResolver", "ResolveResult",
    "AppLauncherService", "create_app_launcher_service",
]
