# test_live_search.py - 实时文件搜索测试
import os
import itertools
import shutil
import tempfile
import threading
import unittest
from unittest.mock import Mock, patch

from agent_app_launcher.live_search import LiveFileSearcher


class TestLiveFileSearcher(unittest.TestCase):
    """测试实时文件搜索"""

    def setUp(self):
        self.drive = tempfile.mkdtemp()
        self.local_dir = os.path.join(self.drive, "Users", "tester", "AppData", "Local")
        self.steam = self._touch("Steam", "steam.exe")
        self._touch("Steam", "steamwebhelper.exe")
        self._touch("Steam", "bin", "steamservice.exe")
        self.bilibili = self._touch("Bili", "哔哩哔哩.exe")
        self._touch("Notes", "steam.txt")

        self.platform = Mock()
        self.platform.get_ready_drives.return_value = [self.drive]
        self.platform.get_user_name.return_value = "tester"
        self.subdirs = [
            os.path.join("Users", "{user}", "AppData", "Local"),
            os.path.join("Users", "{user}", "AppData", "Roaming"),
        ]
        self.searcher = LiveFileSearcher(self.platform, subdirs=self.subdirs, timeout=0)

    def tearDown(self):
        shutil.rmtree(self.drive)

    def _touch(self, *parts):
        path = os.path.join(self.local_dir, *parts)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'wb') as f:
            f.write(b"MZ")
        return path

    def test_search_roots(self):
        """测试只保留存在的搜索目录"""
        self.assertEqual(self.searcher.search_roots(), [self.local_dir])

    def test_shortest_name_wins(self):
        """测试多个候选时取文件名最短者"""
        self.assertEqual(self.searcher.search("steam"), self.steam)
        self.assertEqual(self.searcher.search("STEAM"), self.steam)

    def test_vendor_pattern(self):
        """测试厂商固定模式"""
        self.assertEqual(self.searcher.search("bilibili"), self.bilibili)

    def test_not_found(self):
        self.assertIsNone(self.searcher.search("nothing"))
        self.assertIsNone(self.searcher.search("   "))

    def test_cancel_event(self):
        """测试取消后不再搜索"""
        cancel_event = threading.Event()
        cancel_event.set()
        self.assertIsNone(self.searcher.search("steam", cancel_event))

    def test_build_patterns(self):
        """测试模式中的通配字符被转义"""
        patterns = self.searcher.build_patterns("My[App]")
        self.assertEqual(patterns[0], "My[[]App].exe")
        self.assertIn("*my[[]app]*.exe", patterns)
        self.assertEqual(len(patterns), len(set(patterns)))

    def test_literal_brackets(self):
        path = self._touch("Odd", "a[b].exe")
        self.assertEqual(self.searcher.search("a[b]"), path)

    def test_depth_limit(self):
        """测试超出深度的文件不会被找到"""
        searcher = LiveFileSearcher(self.platform, subdirs=self.subdirs, max_depth=1, timeout=0)
        self.assertIsNone(searcher.search("steamservice"))
        self.assertEqual(searcher.search("steam"), self.steam)

    @patch('agent_app_launcher.live_search.time')
    def test_timeout_returns_best_so_far(self, mock_time):
        """测试超时后停止遍历并返回已找到的最佳项"""
        # 根目录的文件先于子目录产出，进入子目录前即超时
        tool = self._touch("steamtool.exe")
        mock_time.monotonic.side_effect = itertools.chain([0, 0], itertools.repeat(100))
        searcher = LiveFileSearcher(self.platform, subdirs=self.subdirs, timeout=5)

        self.assertEqual(searcher.find_candidates("steam"), [tool])

    @patch('agent_app_launcher.live_search.time')
    def test_timeout_before_any_match(self, mock_time):
        mock_time.monotonic.side_effect = itertools.chain([0], itertools.repeat(100))
        searcher = LiveFileSearcher(self.platform, subdirs=self.subdirs, timeout=5)
        self.assertIsNone(searcher.search("steam"))

    def test_nested_roots_no_duplicates(self):
        """测试嵌套的搜索目录不会重复记录同一文件"""
        tool = self._touch("Programs", "Tool", "mytool.exe")
        subdirs = self.subdirs + [os.path.join("Users", "{user}", "AppData", "Local", "Programs")]
        searcher = LiveFileSearcher(self.platform, subdirs=subdirs, timeout=0)

        self.assertEqual(len(searcher.search_roots()), 2)
        self.assertEqual(searcher.find_candidates("mytool"), [tool])
        self.assertEqual(searcher.search("mytool"), tool)


if __name__ == "__main__":
    unittest.main()
