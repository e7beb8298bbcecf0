# launcher_service.py - 应用启动服务：解析并启动、映射管理、handoff请求处理
import os
import json
import asyncio
import logging
import threading
import traceback
from datetime import datetime
from typing import Dict, List, Mapping, Optional, Tuple

from agent_app_launcher.app_catalog import CONTROL_PANEL_COMMANDS, DEFAULT_ALIASES
from agent_app_launcher.app_index import AppIndex, IndexEntry, guess_kind
from agent_app_launcher.app_launcher import AppLauncher, LaunchResult, LaunchStatus
from agent_app_launcher.app_resolver import AppResolver, create_default_strategies
from agent_app_launcher.app_scanners import SourceScanner, create_default_scanners
from agent_app_launcher.config import load_config
from agent_app_launcher.index_builder import IndexBuilder
from agent_app_launcher.live_search import LiveFileSearcher
from agent_app_launcher.platform_utils import PlatformUtils, get_platform_utils
from agent_app_launcher.shortcut_resolver import ShortcutResolver

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'

# 调用方可能未去掉的触发词
TRIGGER_WORDS = ("打开", "启动", "运行", "开启", "帮我打开", "open ", "launch ", "run ", "start ")


def strip_trigger_words(text: str) -> str:
    """去掉开头的“打开/启动/运行”等触发词"""
    text = (text or "").strip()
    lowered = text.lower()
    for word in sorted(TRIGGER_WORDS, key=len, reverse=True):
        if lowered.startswith(word) and len(text) > len(word.strip()):
            return text[len(word):].strip()
    return text


class AppLauncherService:
    """应用启动服务 - 索引归解析器与启动器共同持有，外部只能通过本服务修改"""

    name = "AppLauncher Service"
    version = "1.0.0"

    def __init__(self, config: Dict = None, scanners: Optional[List[SourceScanner]] = None,
                 platform_utils: Optional[PlatformUtils] = None):
        self.config = load_config(config)
        self._setup_logging()

        self.platform = platform_utils or get_platform_utils()
        self.index = AppIndex(aliases=DEFAULT_ALIASES, control_panel=CONTROL_PANEL_COMMANDS)
        self.shortcut_resolver = ShortcutResolver(
            self.platform, fallback_max_depth=self.config["shortcut_fallback_max_depth"])
        self.builder = IndexBuilder(
            scanners if scanners is not None else create_default_scanners(self.config, self.platform),
            parallel=self.config["parallel_scan"],
        )

        live_searcher = None
        if self.config["live_search_enabled"]:
            live_searcher = LiveFileSearcher(
                self.platform,
                max_depth=self.config["live_search_max_depth"],
                timeout=self.config["live_search_timeout"],
            )
        self.resolver = AppResolver(self.index, create_default_strategies(live_searcher))
        self.launcher = AppLauncher(self.shortcut_resolver, self.config)

        self.initialized = False
        self._init_lock = threading.Lock()
        self.stats = {
            "total_requests": 0,
            "successful_requests": 0,
            "failed_requests": 0,
            "last_error": None,
            "startup_time": None,
        }

    def _setup_logging(self) -> None:
        """设置日志配置"""
        log_level = getattr(logging, str(self.config.get("log_level", "INFO")).upper(), logging.INFO)
        package_logger = logging.getLogger("agent_app_launcher")
        package_logger.setLevel(log_level)

        if self.config.get("debug_mode"):
            log_file = os.path.join(os.path.dirname(__file__), "debug.log")
            if not any(isinstance(h, logging.FileHandler) and h.baseFilename == os.path.abspath(log_file)
                       for h in package_logger.handlers):
                file_handler = logging.FileHandler(log_file, encoding='utf-8')
                file_handler.setLevel(logging.DEBUG)
                file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
                package_logger.addHandler(file_handler)

    # ---- 索引构建 ----

    def _apply_scan_result(self, merged: Dict[str, IndexEntry]) -> None:
        self.index.merge(merged)
        self.stats["startup_time"] = datetime.now()
        self.initialized = True
        logger.info(f"✅ {self.name} v{self.version} 索引就绪，共 {len(self.index)} 个条目")

    def initialize(self) -> None:
        """同步构建索引，每个进程只执行一次"""
        with self._init_lock:
            if self.initialized:
                return
            self._apply_scan_result(self.builder.build())

    async def initialize_async(self) -> None:
        """在已有事件循环中构建索引，并发调用共用同一次扫描"""
        if self.initialized:
            return
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self.initialize)

    # ---- 对外接口 ----

    def resolve_and_launch(self, name: str,
                           cancel_event: Optional[threading.Event] = None) -> Tuple[bool, str]:
        """解析名称并启动，返回 (是否成功, 提示信息)"""
        status = self.launch(name, cancel_event)
        return status.success, status.message

    def launch(self, name: str, cancel_event: Optional[threading.Event] = None) -> LaunchStatus:
        if not self.initialized:
            self.initialize()
        resolution = self.resolver.resolve(name, cancel_event)
        if not resolution.success:
            return LaunchStatus(
                result=LaunchResult.NOT_FOUND,
                message=resolution.message,
                app_name=resolution.query,
            )
        entry = resolution.entry
        return self.launcher.launch(entry.target, entry.display_name, entry.kind)

    def add_mapping(self, name: str, path: str) -> None:
        """手动添加或修正映射，立即生效"""
        if not name or not name.strip():
            raise ValueError("应用名称不能为空")
        self.index.put(IndexEntry(name.strip(), path, guess_kind(path), "manual"))
        logger.info(f"➕ 已添加映射: {name} -> {path}")

    def remove_mapping(self, name: str) -> bool:
        removed = self.index.remove(name)
        if removed:
            logger.info(f"➖ 已删除映射: {name}")
        return removed

    def list_mappings(self) -> Mapping[str, str]:
        return self.index.snapshot()

    # ---- handoff 请求 ----

    async def handle_handoff(self, data: Dict) -> str:
        """处理 handoff 请求，返回 JSON 字符串"""
        self.stats["total_requests"] += 1
        request_id = f"req_{self.stats['total_requests']}"
        if isinstance(data, dict):
            request_id = data.get("request_id", request_id)

        validation = self._validate_request(data)
        if not validation["valid"]:
            self.stats["failed_requests"] += 1
            return json.dumps(self._error_response(validation["message"], request_id, "INVALID_REQUEST"),
                              ensure_ascii=False)

        logger.info(f"📥 收到请求 [{request_id}]: {data['tool_name']}")

        try:
            if not self.initialized:
                await self.initialize_async()
            result = await self._process_request(data["tool_name"], data, request_id)
        except Exception as e:
            self.stats["failed_requests"] += 1
            self.stats["last_error"] = str(e)
            logger.error(f"❌ 处理请求失败 [{request_id}]: {e}")
            logger.debug(traceback.format_exc())
            return json.dumps(self._error_response(
                f"处理请求时发生内部错误: {str(e)}", request_id, "INTERNAL_ERROR",
                details=traceback.format_exc() if self.config.get("debug_mode") else None,
            ), ensure_ascii=False)

        if result.get("success", False):
            self.stats["successful_requests"] += 1
        else:
            self.stats["failed_requests"] += 1
            self.stats["last_error"] = result.get("message", "Unknown error")

        return json.dumps(result, ensure_ascii=False)

    def _validate_request(self, data: Dict) -> Dict:
        """验证请求数据"""
        if not isinstance(data, dict):
            return {"valid": False, "message": "请求数据必须是JSON对象"}

        tool_name = data.get("tool_name")
        if not tool_name:
            return {"valid": False, "message": "缺少tool_name参数"}

        if not isinstance(tool_name, str):
            return {"valid": False, "message": "tool_name必须是字符串"}

        return {"valid": True, "message": "验证通过"}

    async def _process_request(self, tool_name: str, data: Dict, request_id: str) -> Dict:
        if tool_name == "启动应用":
            return await self._handle_launch_app(data, request_id)
        elif tool_name == "获取应用列表":
            return self._handle_get_apps(data, request_id)
        elif tool_name == "添加应用映射":
            return self._handle_add_mapping(data, request_id)
        elif tool_name == "删除应用映射":
            return self._handle_remove_mapping(data, request_id)
        elif tool_name == "获取启动历史":
            history = self.launcher.get_launch_history(data.get("limit", 10))
            return self._response(True, "launch_history", f"✅ 获取到 {len(history)} 条启动记录",
                                  request_id, {"history": history})
        elif tool_name == "获取统计信息":
            return self._response(True, "stats", "✅ 已获取统计信息", request_id, self.get_stats())
        return self._response(False, "error", f"未知的操作: {tool_name}", request_id)

    async def _handle_launch_app(self, data: Dict, request_id: str) -> Dict:
        app_name = strip_trigger_words(data.get("app", ""))
        if not app_name:
            return self._response(False, "error", "缺少app参数", request_id)

        logger.info(f"🚀 启动应用请求: {app_name}")
        loop = asyncio.get_running_loop()
        status = await loop.run_in_executor(None, self.launch, app_name)

        return self._response(
            status.success,
            "app_started" if status.success else status.result.value,
            status.message,
            request_id,
            {
                "app_name": status.app_name,
                "target": status.target,
                "launch_method": status.launch_method,
                "error_details": status.error_details,
                "suggestion": self._get_error_suggestion(status.result),
            },
        )

    def _handle_get_apps(self, data: Dict, request_id: str) -> Dict:
        limit = data.get("limit", 100)
        names = sorted(self.list_mappings().keys(), key=str.lower)
        return self._response(True, "apps_list", f"✅ 已获取到 {len(names)} 个可用应用", request_id, {
            "total_count": len(names),
            "apps": names[:limit],
            "has_more": len(names) > limit,
            "scan_stats": self.builder.get_scan_stats(),
            "last_updated": datetime.now().isoformat(),
        })

    def _handle_add_mapping(self, data: Dict, request_id: str) -> Dict:
        app_name, path = data.get("app"), data.get("path")
        if not app_name or not path:
            return self._response(False, "error", "缺少app或path参数", request_id)
        self.add_mapping(app_name, path)
        return self._response(True, "mapping_added", f"✅ 已添加映射: {app_name}", request_id,
                              {"app_name": app_name, "path": path})

    def _handle_remove_mapping(self, data: Dict, request_id: str) -> Dict:
        app_name = data.get("app")
        if not app_name:
            return self._response(False, "error", "缺少app参数", request_id)
        if self.remove_mapping(app_name):
            return self._response(True, "mapping_removed", f"✅ 已删除映射: {app_name}", request_id)
        return self._response(False, LaunchResult.NOT_FOUND.value, f"未找到应用: {app_name}", request_id)

    @staticmethod
    def _get_error_suggestion(result: LaunchResult) -> Optional[str]:
        suggestions = {
            LaunchResult.NOT_FOUND: "请检查应用名称，或通过“添加应用映射”手动指定路径",
            LaunchResult.SHORTCUT_UNRESOLVED: "快捷方式可能已失效，请重新安装应用或手动添加映射",
            LaunchResult.LAUNCH_FAILED: "请检查权限或文件关联设置",
            LaunchResult.INVALID_TARGET: "映射的路径已不存在，请更新映射",
        }
        return suggestions.get(result)

    @staticmethod
    def _response(success: bool, status: str, message: str, request_id: str, data: Dict = None) -> Dict:
        return {
            "success": success,
            "status": status,
            "message": message,
            "request_id": request_id,
            "data": data or {},
        }

    @staticmethod
    def _error_response(message: str, request_id: str, error_code: str, details: str = None) -> Dict:
        return {
            "success": False,
            "status": "error",
            "message": message,
            "request_id": request_id,
            "data": {"error_code": error_code, "details": details},
        }

    def get_stats(self) -> Dict:
        return {
            "requests": {k: (str(v) if isinstance(v, datetime) else v) for k, v in self.stats.items()},
            "index_size": len(self.index),
            "scan_stats": self.builder.get_scan_stats(),
            "launcher_stats": self.launcher.get_stats(),
        }


def create_app_launcher_service(config: Dict = None, build_index: bool = True) -> AppLauncherService:
    """创建服务实例并构建索引"""
    service = AppLauncherService(config)
    if build_index:
        service.initialize()
    return service
