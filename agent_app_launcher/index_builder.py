# index_builder.py - 并行运行扫描器并按优先级合并索引
import time
import asyncio
import logging
from typing import Dict, List

from agent_app_launcher.app_index import IndexEntry, merge_entries
from agent_app_launcher.app_scanners import SourceScanner

logger = logging.getLogger(__name__)


class IndexBuilder:
    """索引构建器 - 扫描器可并行执行，合并步骤串行，保证后写覆盖的优先级"""

    def __init__(self, scanners: List[SourceScanner], parallel: bool = True):
        self.scanners = scanners
        self.parallel = parallel
        self._scan_stats = {
            "total_scanned": 0,
            "merged_count": 0,
            "error_count": 0,
            "scan_duration": 0,
            "scanners": {},
        }

    async def scan_all(self) -> Dict[str, IndexEntry]:
        """扫描所有来源并合并"""
        start_time = time.time()
        logger.info("🔍 开始扫描所有应用来源...")

        if self.parallel:
            # 扫描器都是阻塞IO，放到线程池中执行
            loop = asyncio.get_running_loop()
            tasks = [loop.run_in_executor(None, scanner.scan) for scanner in self.scanners]
            results = await asyncio.gather(*tasks, return_exceptions=True)
        else:
            results = []
            for scanner in self.scanners:
                try:
                    results.append(scanner.scan())
                except Exception as e:
                    results.append(e)

        batches = []
        error_count = 0
        for scanner, result in zip(self.scanners, results):
            if isinstance(result, BaseException):
                logger.error(f"扫描任务失败 {scanner.name}: {result}")
                error_count += 1
                batches.append([])
                continue
            batches.append(result)
            error_count += scanner.stats.get("error_count", 0)

        merged = merge_entries(batches)

        self._scan_stats["total_scanned"] = sum(len(batch) for batch in batches)
        self._scan_stats["merged_count"] = len(merged)
        self._scan_stats["error_count"] = error_count
        self._scan_stats["scan_duration"] = time.time() - start_time
        self._scan_stats["scanners"] = {s.name: dict(s.stats) for s in self.scanners}

        logger.info(f"✅ 扫描完成，共找到 {len(merged)} 个应用 "
                    f"(原始: {self._scan_stats['total_scanned']}, 错误: {error_count}, "
                    f"耗时: {self._scan_stats['scan_duration']:.2f}s)")
        return merged

    def build(self) -> Dict[str, IndexEntry]:
        """同步构建，供没有事件循环的调用方使用"""
        return asyncio.run(self.scan_all())

    def get_scan_stats(self) -> Dict:
        """获取扫描统计信息"""
        return dict(self._scan_stats)
