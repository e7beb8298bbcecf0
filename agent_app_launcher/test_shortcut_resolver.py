# test_shortcut_resolver.py - 快捷方式解析测试
import os
import shutil
import tempfile
import unittest
from unittest.mock import Mock, patch

from agent_app_launcher.shortcut_resolver import ShortcutResolver


class TestExtractCandidates(unittest.TestCase):
    """测试从快捷方式内容中提取路径"""

    def test_ansi_path(self):
        data = b"L\x00\x00\x00\x01\x14\x02garbage C:\\Program Files\\App\\app.exe\x00tail"
        candidates = list(ShortcutResolver.extract_candidates(data))
        self.assertEqual(candidates[0], "C:\\Program Files\\App\\app.exe")

    def test_utf16_path(self):
        """测试 UTF-16LE 编码的路径（含奇数偏移）"""
        text = "D:\\Games\\Steam\\steam.exe".encode("utf-16-le")
        for prefix in (b"\x00\x00", b"\x01"):
            with self.subTest(prefix=prefix):
                candidates = list(ShortcutResolver.extract_candidates(prefix + text + b"\x00\x00"))
                self.assertIn("D:\\Games\\Steam\\steam.exe", candidates)

    def test_duplicates_removed(self):
        data = b"C:\\A\\a.exe\x00c:\\a\\A.EXE\x00"
        candidates = list(ShortcutResolver.extract_candidates(data))
        self.assertEqual(candidates, ["C:\\A\\a.exe"])

    def test_no_path(self):
        self.assertEqual(list(ShortcutResolver.extract_candidates(b"\x00\x01nothing here")), [])

    @unittest.skipUnless(os.name == "nt", "%VAR% 展开仅在 Windows 上生效")
    def test_environment_variable(self):
        with patch.dict(os.environ, {"MYAPPDIR": "C:\\Tools"}):
            candidates = list(ShortcutResolver.extract_candidates(b"\x00%MYAPPDIR%\\tool.exe\x00"))
        self.assertIn("C:\\Tools\\tool.exe", candidates)


class TestShortcutResolver(unittest.TestCase):
    """测试快捷方式解析器"""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.menu_dir = os.path.join(self.temp_dir, "menu")
        self.install_dir = os.path.join(self.temp_dir, "install")
        os.makedirs(self.menu_dir)
        os.makedirs(os.path.join(self.install_dir, "Vendor"))
        self.platform = Mock()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def _write_lnk(self, name, content):
        path = os.path.join(self.menu_dir, name)
        with open(path, 'wb') as f:
            f.write(content)
        return path

    def test_embedded_target(self):
        """测试嵌入路径存在时直接返回"""
        lnk = self._write_lnk("Demo.lnk", b"\x00\x00C:\\Apps\\demo.exe\x00\x00")
        resolver = ShortcutResolver(self.platform, install_roots=[])

        with patch('agent_app_launcher.shortcut_resolver.os.path.isfile',
                   side_effect=lambda p: p == "C:\\Apps\\demo.exe"):
            self.assertEqual(resolver.resolve(lnk), "C:\\Apps\\demo.exe")

    def test_fallback_by_name(self):
        """测试按快捷方式名称在安装目录中查找"""
        exe = os.path.join(self.install_dir, "Vendor", "MyApp.exe")
        with open(exe, 'wb') as f:
            f.write(b"MZ")
        lnk = self._write_lnk("MyApp.lnk", b"no paths here")

        resolver = ShortcutResolver(self.platform, install_roots=[self.install_dir])
        self.assertEqual(resolver.resolve(lnk), exe)

        shallow = ShortcutResolver(self.platform, install_roots=[self.install_dir], fallback_max_depth=0)
        self.assertIsNone(shallow.resolve(lnk))

    def test_dangling_target(self):
        """测试目标不存在时返回 None"""
        lnk = self._write_lnk("Gone.lnk", b"\x00C:\\Nowhere\\gone.exe\x00")
        resolver = ShortcutResolver(self.platform, install_roots=[self.install_dir])
        self.assertIsNone(resolver.resolve(lnk))

    def test_missing_file_never_raises(self):
        resolver = ShortcutResolver(self.platform, install_roots=[])
        self.assertIsNone(resolver.resolve(os.path.join(self.menu_dir, "missing.lnk")))

    def test_install_roots_from_platform(self):
        """测试未指定安装目录时从平台工具获取"""
        self.platform.get_install_roots.return_value = [self.install_dir]
        resolver = ShortcutResolver(self.platform)
        self.assertEqual(resolver.install_roots, [self.install_dir])
        self.assertEqual(resolver.install_roots, [self.install_dir])
        self.platform.get_install_roots.assert_called_once()


if __name__ == "__main__":
    unittest.main()
