# shortcut_resolver.py - 快捷方式目标解析（启发式，不解析 .lnk 二进制结构）
import os
import re
import locale
import logging
from typing import Iterator, List, Optional

from agent_app_launcher.app_index import EXECUTABLE_EXTENSION
from agent_app_launcher.platform_utils import PlatformUtils, get_platform_utils, iter_files

logger = logging.getLogger(__name__)

# 盘符或环境变量开头、以 .exe 结尾的路径片段
_EMBEDDED_EXE_RE = re.compile(
    r"(?:[A-Za-z]:\\|%[A-Za-z0-9_()]+%\\)[^\x00-\x1f\"*?<>|:%]*?\.exe(?![\w.])",
    re.IGNORECASE,
)


class ShortcutResolver:
    """从快捷方式文件中找出真实的可执行文件"""

    def __init__(self, platform_utils: Optional[PlatformUtils] = None,
                 install_roots: Optional[List[str]] = None,
                 fallback_max_depth: int = 3):
        self.platform = platform_utils or get_platform_utils()
        self._install_roots = install_roots
        self.fallback_max_depth = fallback_max_depth

    @property
    def install_roots(self) -> List[str]:
        if self._install_roots is None:
            self._install_roots = self.platform.get_install_roots()
        return self._install_roots

    def resolve(self, lnk_path: str) -> Optional[str]:
        """返回快捷方式指向的可执行文件路径，找不到时返回 None，从不抛出异常"""
        try:
            target = self._find_embedded_target(lnk_path)
            if target:
                return target

            target = self._search_by_name(lnk_path)
            if target:
                logger.debug(f"快捷方式 {lnk_path} 通过名称回退找到: {target}")
                return target
        except Exception as e:
            logger.debug(f"解析快捷方式失败 {lnk_path}: {e}")
            return None

        logger.debug(f"无法解析快捷方式目标: {lnk_path}")
        return None

    def _find_embedded_target(self, lnk_path: str) -> Optional[str]:
        try:
            with open(lnk_path, 'rb') as f:
                data = f.read()
        except OSError as e:
            logger.debug(f"读取快捷方式失败 {lnk_path}: {e}")
            return None

        for candidate in self.extract_candidates(data):
            if os.path.isfile(candidate):
                return candidate
        return None

    @staticmethod
    def extract_candidates(data: bytes) -> Iterator[str]:
        """按出现顺序产出文件内容中嵌入的 .exe 路径（ANSI 与 UTF-16LE 两种编码）"""
        renderings = [
            data.decode(locale.getpreferredencoding(False) or "latin-1", errors="ignore"),
            data.decode("utf-16-le", errors="ignore"),
            data[1:].decode("utf-16-le", errors="ignore"),
        ]
        seen = set()
        for text in renderings:
            for match in _EMBEDDED_EXE_RE.finditer(text):
                candidate = os.path.expandvars(match.group(0))
                if candidate.lower() in seen:
                    continue
                seen.add(candidate.lower())
                yield candidate

    def _search_by_name(self, lnk_path: str) -> Optional[str]:
        """在常见安装目录中查找与快捷方式同名的可执行文件"""
        stem = os.path.splitext(os.path.basename(lnk_path))[0]
        if not stem:
            return None
        wanted = stem.lower()
        if not wanted.endswith(EXECUTABLE_EXTENSION):
            wanted += EXECUTABLE_EXTENSION

        for root in self.install_roots:
            for dirpath, filename in iter_files(root, self.fallback_max_depth):
                if filename.lower() == wanted:
                    return os.path.join(dirpath, filename)
        return None
