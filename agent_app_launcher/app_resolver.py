# app_resolver.py - 按顺序执行匹配策略，把名称解析为启动目标
import logging
import threading
from typing import List, Optional
from dataclasses import dataclass

from agent_app_launcher.app_index import AppIndex, IndexEntry
from agent_app_launcher.live_search import LiveFileSearcher
from agent_app_launcher.match_strategies import (
    AliasMatch, ControlPanelMatch, ExactMatch, FullPathMatch, FuzzyMatch,
    LiveSearchMatch, MatchStrategy,
)

logger = logging.getLogger(__name__)


@dataclass
class ResolveResult:
    """解析结果数据类"""
    success: bool
    query: str
    message: str
    entry: Optional[IndexEntry] = None
    strategy: Optional[str] = None


def create_default_strategies(live_searcher: Optional[LiveFileSearcher] = None) -> List[MatchStrategy]:
    """默认策略顺序：精确 > 控制面板 > 别名 > 实时搜索 > 模糊 > 完整路径"""
    strategies: List[MatchStrategy] = [ExactMatch(), ControlPanelMatch(), AliasMatch()]
    if live_searcher is not None:
        strategies.append(LiveSearchMatch(live_searcher))
    strategies.extend([FuzzyMatch(), FullPathMatch()])
    return strategies


class AppResolver:
    """应用名称解析器"""

    def __init__(self, index: AppIndex, strategies: Optional[List[MatchStrategy]] = None):
        self.index = index
        self.strategies = strategies if strategies is not None else create_default_strategies()

    def resolve(self, name: str, cancel_event: Optional[threading.Event] = None) -> ResolveResult:
        """依次尝试各策略，第一个命中即返回"""
        query = (name or "").strip()
        if not query:
            return ResolveResult(False, name or "", f"未找到应用: {name or ''}")

        for strategy in self.strategies:
            try:
                entry = strategy.match(query, self.index, cancel_event)
            except Exception as e:
                logger.error(f"匹配策略 {strategy.name} 执行失败 ({query}): {e}")
                continue

            if entry is not None:
                logger.info(f"✅ {query} -> {entry.display_name} [{strategy.name}] {entry.target}")
                return ResolveResult(
                    success=True,
                    query=query,
                    message=f"已找到 {entry.display_name} ({strategy.label or strategy.name})",
                    entry=entry,
                    strategy=strategy.name,
                )

        logger.info(f"❌ 未找到应用: {query}")
        return ResolveResult(False, query, f"未找到应用: {query}")
