# app_catalog.py - 静态应用目录：预置应用、别名、控制面板命令、厂商注册表键

# 系统工具：(显示名称, 可执行文件, 所在目录 system/windows)
SYSTEM_UTILITIES = [
    ("记事本", "notepad.exe", "system"),
    ("计算器", "calc.exe", "system"),
    ("命令提示符", "cmd.exe", "system"),
    ("控制面板", "control.exe", "system"),
    ("任务管理器", "taskmgr.exe", "system"),
    ("资源管理器", "explorer.exe", "windows"),
]

# 用户文件夹：(显示名称, Shell Folders 值名, 用户目录下的默认子目录)
USER_FOLDERS = [
    ("下载", "{374DE290-123F-4565-9164-39C4925E467B}", "Downloads"),
    ("桌面", "Desktop", "Desktop"),
    ("文档", "Personal", "Documents"),
]

DRIVE_SUFFIX = "盘"

# 常用应用：(显示名称, 可执行文件, 相对安装目录候选)
KNOWN_APPS = [
    ("微信", "WeChat.exe", [r"Tencent\WeChat"]),
    ("企业微信", "WXWork.exe", [r"Tencent\WXWork", "WXWork"]),
    ("Chrome", "chrome.exe", [r"Google\Chrome\Application"]),
    ("Edge", "msedge.exe", [r"Microsoft\Edge\Application"]),
    ("火狐", "firefox.exe", ["Mozilla Firefox"]),
    ("Word", "WINWORD.EXE", [rf"Microsoft Office\{v}" for v in ("Office16", "Office15", "Office14")]
     + [r"Microsoft Office\root\Office16"]),
    ("Excel", "EXCEL.EXE", [rf"Microsoft Office\{v}" for v in ("Office16", "Office15", "Office14")]
     + [r"Microsoft Office\root\Office16"]),
    ("PowerPoint", "POWERPNT.EXE", [rf"Microsoft Office\{v}" for v in ("Office16", "Office15", "Office14")]
     + [r"Microsoft Office\root\Office16"]),
    ("EV录屏", "EV.exe", ["EVCapture"]),
    ("钉钉", "DingTalk.exe", ["DingTalk"]),
    ("有道云笔记", "YoudaoNote.exe", [r"Youdao\YoudaoNote"]),
    ("网易云音乐", "CloudMusic.exe", [r"Netease\CloudMusic"]),
    ("QQ", "QQ.exe", [r"Tencent\QQ", r"Tencent\QQNT"]),
    ("QQ音乐", "QQMusic.exe", [r"Tencent\QQMusic"]),
]

CONTROL_PANEL_COMMANDS = {
    "网络设置": "ncpa.cpl",
    "网络连接": "ncpa.cpl",
    "网络适配器": "ncpa.cpl",
    "网络和共享中心": "control.exe /name Microsoft.NetworkAndSharingCenter",
    "系统设置": "control.exe system",
    "声音设置": "mmsys.cpl",
    "防火墙设置": "firewall.cpl",
    "电源选项": "powercfg.cpl",
    "区域设置": "intl.cpl",
    "鼠标设置": "main.cpl",
    "显示设置": "desk.cpl",
    "设备管理器": "devmgmt.msc",
    "服务": "services.msc",
    "任务计划": "taskschd.msc",
}

# 规范名称 -> 别名
DEFAULT_ALIASES = {
    "Chrome": ["chrome.exe", "谷歌浏览器", "浏览器", "google chrome"],
    "Edge": ["msedge", "msedge.exe", "微软浏览器", "microsoft edge"],
    "火狐": ["firefox", "firefox.exe", "火狐浏览器"],
    "微信": ["wechat", "weixin", "wechat.exe"],
    "企业微信": ["wxwork", "wecom"],
    "QQ音乐": ["qqmusic"],
    "网易云音乐": ["cloudmusic", "网易云"],
    "哔哩哔哩": ["bilibili", "b站", "哔哩"],
    "钉钉": ["dingtalk"],
    "有道云笔记": ["youdaonote", "有道笔记"],
    "Word": ["winword", "winword.exe", "文档编辑"],
    "Excel": ["excel.exe", "表格"],
    "PowerPoint": ["powerpnt", "ppt", "幻灯片"],
    "记事本": ["notepad", "notepad.exe"],
    "计算器": ["calc", "calculator", "calc.exe"],
    "命令提示符": ["cmd", "cmd.exe", "命令行", "终端"],
    "任务管理器": ["taskmgr", "taskmgr.exe"],
    "资源管理器": ["explorer", "文件管理器", "我的电脑", "此电脑"],
    "控制面板": ["control", "control panel"],
    "Steam": ["蒸汽", "steam平台"],
    "下载": ["downloads", "下载文件夹"],
    "桌面": ["desktop"],
    "文档": ["documents", "我的文档"],
}

# 注册表扫描的子树：(根键名, 子键路径, 类型)
REGISTRY_SUBTREES = [
    ("HKEY_LOCAL_MACHINE", r"SOFTWARE\Microsoft\Windows\CurrentVersion\App Paths", "app_paths"),
    ("HKEY_CURRENT_USER", r"SOFTWARE\Microsoft\Windows\CurrentVersion\App Paths", "app_paths"),
    ("HKEY_LOCAL_MACHINE", r"SOFTWARE\Microsoft\Windows\CurrentVersion\Uninstall", "uninstall"),
    ("HKEY_LOCAL_MACHINE", r"SOFTWARE\WOW6432Node\Microsoft\Windows\CurrentVersion\Uninstall", "uninstall"),
    ("HKEY_CURRENT_USER", r"SOFTWARE\Microsoft\Windows\CurrentVersion\Uninstall", "uninstall"),
    ("HKEY_LOCAL_MACHINE", r"SOFTWARE\Classes\Applications", "handlers"),
    ("HKEY_CURRENT_USER", r"SOFTWARE\Classes\Applications", "handlers"),
]

# 厂商专用键：(显示名称, 根键名, 子键路径, 值名, 值为目录时拼接的可执行文件)
VENDOR_REGISTRY_KEYS = [
    ("Steam", "HKEY_CURRENT_USER", r"SOFTWARE\Valve\Steam", "SteamExe", None),
    ("Steam", "HKEY_LOCAL_MACHINE", r"SOFTWARE\WOW6432Node\Valve\Steam", "InstallPath", "steam.exe"),
    ("QQ", "HKEY_LOCAL_MACHINE", r"SOFTWARE\WOW6432Node\Tencent\QQNT", "Install", "QQ.exe"),
    ("微信", "HKEY_CURRENT_USER", r"SOFTWARE\Tencent\WeChat", "InstallPath", "WeChat.exe"),
]

# 扫描时忽略的辅助程序前缀
SKIP_EXECUTABLE_PREFIXES = ("unins", "uninstall", "update", "updater", "setup", "crashpad",
                            "crashreport", "bugreport", "helper")

# 实时搜索：每个盘符下的用户应用数据目录，{user} 替换为当前用户名
LIVE_SEARCH_SUBDIRS = [
    r"Users\{user}\AppData\Local",
    r"Users\{user}\AppData\Roaming",
    r"Users\{user}\AppData\Local\Programs",
]

# 常被误写的厂商应用：查询关键字（小写） -> 文件名模式
LIVE_SEARCH_VENDOR_PATTERNS = {
    "微信": ["WeChat.exe", "Weixin.exe"],
    "wechat": ["WeChat.exe", "Weixin.exe"],
    "bilibili": ["哔哩哔哩.exe", "bilibili*.exe"],
    "哔哩哔哩": ["哔哩哔哩.exe", "bilibili*.exe"],
    "网易云音乐": ["cloudmusic.exe"],
    "钉钉": ["DingTalk.exe"],
    "飞书": ["Feishu.exe", "Lark.exe"],
    "vscode": ["Code.exe"],
    "企业微信": ["WXWork.exe"],
}
