# __main__.py - 命令行入口：列出索引或启动指定应用
import sys
import logging

from agent_app_launcher.launcher_service import LOG_FORMAT, create_app_launcher_service


def list_all_apps(service) -> None:
    """列出所有应用"""
    mappings = service.list_mappings()

    print("=== 找到的所有应用 ===")
    print(f"总计: {len(mappings)} 个应用\n")

    for i, name in enumerate(sorted(mappings, key=str.lower), 1):
        print(f"{i:3d}. {name}")
        print(f"     路径: {mappings[name]}")


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

    service = create_app_launcher_service()

    if not argv:
        list_all_apps(service)
        return 0

    success, message = service.resolve_and_launch(" ".join(argv))
    print(message)
    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
