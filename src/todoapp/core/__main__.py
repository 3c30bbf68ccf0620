"""CLI 入口模块 -- python -m todoapp.core <command>

支持的命令：
  create-user <name> <email>  注册用户并输出 user_id
  show-history <task_id>      按时间倒序输出任务变更历史
"""

import asyncio
import sys
from datetime import UTC, datetime

from ulid import ULID

from .config import get_db_path

USAGE = """用法: python -m todoapp.core <command>
命令:
  create-user <name> <email>  注册用户并输出 user_id
  show-history <task_id>      按时间倒序输出任务变更历史"""


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print(USAGE)
        sys.exit(1)

    command, args = sys.argv[1], sys.argv[2:]

    if command == "create-user" and len(args) == 2:
        sys.exit(asyncio.run(create_user(*args)))
    elif command == "show-history" and len(args) == 1:
        sys.exit(asyncio.run(show_history(args[0])))
    else:
        print(f"未知命令或参数错误: {' '.join(sys.argv[1:])}")
        print(USAGE)
        sys.exit(1)


async def create_user(name: str, email: str) -> int:
    """注册用户，字段校验失败或邮箱已存在时返回 1"""
    from .models import User, validate_registration
    from .store import create_store_group

    name, email = name.strip(), email.strip()
    errors = validate_registration(name, email)
    if errors:
        for field, messages in errors.items():
            print(f"{field}: {', '.join(messages)}")
        return 1

    store_group = await create_store_group(get_db_path())
    try:
        if await store_group.user_store.get_user_by_email(email):
            print(f"邮箱已存在: {email}")
            return 1
        user = User(
            user_id=str(ULID()),
            name=name,
            email=email,
            created_at=datetime.now(UTC),
        )
        await store_group.user_store.create_user(user)
        await store_group.conn.commit()
        print(user.user_id)
        return 0
    finally:
        await store_group.conn.close()


async def show_history(task_id: str) -> int:
    """输出任务历史（同一秒内的变更归为一组），任务不存在时返回 1"""
    from .history import group_by_second, human_readable_change
    from .store import create_store_group

    store_group = await create_store_group(get_db_path())
    try:
        task = await store_group.task_store.get_task(task_id)
        if task is None:
            print(f"任务不存在: {task_id}")
            return 1
        entries = await store_group.history_store.list_for_task(task_id)
        users = await store_group.user_store.get_users({e.user_id for e in entries})
        print(f"{task.title} ({len(entries)} 条记录)")
        for ts, group in group_by_second(entries):
            actor = users.get(group[0].user_id)
            stamp = datetime.fromtimestamp(ts, UTC).isoformat()
            print(f"{stamp}  {actor.name if actor else group[0].user_id}")
            for e in group:
                print(f"  - {human_readable_change(e)}")
        return 0
    finally:
        await store_group.conn.close()


if __name__ == "__main__":
    main()
