# test_index_builder.py - 索引构建测试
import asyncio
import time
import unittest

from agent_app_launcher.app_index import IndexEntry
from agent_app_launcher.app_scanners import SourceScanner
from agent_app_launcher.index_builder import IndexBuilder


class FixedScanner(SourceScanner):

    def __init__(self, name, entries, delay=0.0):
        super().__init__()
        self.name = name
        self.entries = entries
        self.delay = delay

    def scan(self):
        time.sleep(self.delay)
        return self._finish(list(self.entries))


class ExplodingScanner(SourceScanner):
    name = "exploding"

    def scan(self):
        raise RuntimeError("扫描失败")


class TestIndexBuilder(unittest.TestCase):
    """测试索引构建器"""

    def _scanners(self):
        # 第一个扫描器最慢，合并顺序仍按列表顺序
        return [
            FixedScanner("predefined", [IndexEntry("Chrome", "C:\\predefined\\chrome.exe")], delay=0.1),
            FixedScanner("registry", [IndexEntry("chrome", "C:\\registry\\chrome.exe"),
                                      IndexEntry("QQ", "C:\\qq.exe")]),
            ExplodingScanner(),
            FixedScanner("shortcut", [IndexEntry("CHROME", "C:\\menu\\Chrome.lnk")]),
        ]

    def test_parallel_priority(self):
        """测试并行扫描时后写覆盖的优先级不变"""
        builder = IndexBuilder(self._scanners(), parallel=True)
        merged = builder.build()

        self.assertEqual(merged["chrome"].target, "C:\\menu\\Chrome.lnk")
        self.assertEqual(merged["qq"].target, "C:\\qq.exe")

        stats = builder.get_scan_stats()
        self.assertEqual(stats["total_scanned"], 4)
        self.assertEqual(stats["merged_count"], 2)
        self.assertEqual(stats["error_count"], 1)
        self.assertEqual(stats["scanners"]["registry"]["entry_count"], 2)

    def test_sequential(self):
        builder = IndexBuilder(self._scanners(), parallel=False)
        merged = asyncio.run(builder.scan_all())
        self.assertEqual(merged["chrome"].target, "C:\\menu\\Chrome.lnk")
        self.assertEqual(len(merged), 2)

    def test_no_scanners(self):
        builder = IndexBuilder([])
        self.assertEqual(builder.build(), {})
        self.assertEqual(builder.get_scan_stats()["merged_count"], 0)


if __name__ == "__main__":
    unittest.main()
