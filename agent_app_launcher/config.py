# config.py - 应用启动引擎配置
import os
import logging
from typing import Dict, Optional, Any

logger = logging.getLogger(__name__)

CONFIG_ENV_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "config.env")


def _load_default_config() -> Dict[str, Any]:
    """加载默认配置"""
    return {
        # 日志
        "log_level": "INFO",
        "debug_mode": False,
        # 索引构建
        "scan_predefined": True,
        "scan_registry": True,
        "scan_filesystem": True,
        "scan_shortcuts": True,
        "parallel_scan": True,
        "filesystem_max_depth": 4,  # 安装目录递归深度
        "scan_secondary_drives": False,  # 是否扫描 D:\ 等非系统盘根目录
        "secondary_drive_max_depth": 2,
        # 快捷方式回退搜索深度
        "shortcut_fallback_max_depth": 3,
        # 实时搜索
        "live_search_enabled": True,
        "live_search_max_depth": 5,
        "live_search_timeout": 10,  # 秒，0表示不限时
        # 启动
        "launch_history_limit": 100,
    }


def _convert_value(value: str) -> Any:
    """转换配置值类型"""
    if value.lower() in ('true', 'false'):
        return value.lower() == 'true'
    if value.isdigit():
        return int(value)
    return value


def load_config_file(config_path: str = CONFIG_ENV_PATH) -> Dict[str, Any]:
    """读取 key=value 格式的配置文件，不存在时返回空字典"""
    config = {}

    if not os.path.exists(config_path):
        return config

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith('#') or '=' not in line:
                    continue
                key, value = line.split('=', 1)
                config[key.strip().lower()] = _convert_value(value.strip())
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"加载配置文件失败 {config_path}: {e}")

    return config


def load_config(overrides: Optional[Dict[str, Any]] = None,
                config_path: str = CONFIG_ENV_PATH) -> Dict[str, Any]:
    """合并配置：默认值 < config.env < 显式传入"""
    config = _load_default_config()
    config.update(load_config_file(config_path))
    if overrides:
        config.update(overrides)
    return config
