"""CLI 入口模块 -- python -m laneboard.core <command>

支持的命令：
  init-db                  初始化数据库表结构
  column-report <space_id> 打印 space 各列的任务顺序与最小 position 间隙
"""

import asyncio
import sys

from .config import get_db_path


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print("用法: python -m laneboard.core <command>")
        print("命令:")
        print("  init-db                  初始化数据库表结构")
        print("  column-report <space_id> 打印各列任务顺序与最小间隙")
        sys.exit(1)

    command = sys.argv[1]

    if command == "init-db":
        asyncio.run(init_database())
    elif command == "column-report":
        if len(sys.argv) < 3:
            print("用法: python -m laneboard.core column-report <space_id>")
            sys.exit(1)
        asyncio.run(column_report(sys.argv[2]))
    else:
        print(f"未知命令: {command}")
        print("可用命令: init-db, column-report")
        sys.exit(1)


async def init_database() -> None:
    """创建数据库与表结构"""
    from .store import create_store_group

    db_path = get_db_path()
    print(f"数据库路径: {db_path}")
    store_group = await create_store_group(db_path)
    await store_group.conn.close()
    print("初始化完成")


async def column_report(space_id: str) -> None:
    """打印各列任务顺序，用于观察 position 间隙余量"""
    from .ordering import smallest_gap
    from .store import create_store_group

    store_group = await create_store_group(get_db_path())

    try:
        space = await store_group.space_store.get_space(space_id)
        if space is None:
            print(f"space 不存在: {space_id}")
            sys.exit(1)

        print(f"{space.key} {space.name}")
        for status in await store_group.space_store.list_statuses(space_id):
            tasks = await store_group.task_store.list_column_tasks(
                space_id, status.status_id
            )
            gap = smallest_gap([t.position for t in tasks])
            gap_text = "-" if gap is None else f"{gap:g}"
            print(f"[{status.name}] {len(tasks)} 个任务，最小间隙 {gap_text}")
            for task in tasks:
                print(f"  {task.position:>16g}  {task.key}  {task.title}")
    finally:
        await store_group.conn.close()


if __name__ == "__main__":
    main()
