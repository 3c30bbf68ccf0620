"""SQLite 数据库初始化

PRAGMA 配置 + 五张表 DDL + 索引创建。
使用 aiosqlite 异步操作。
"""

import aiosqlite

# users 表 DDL
_USERS_DDL = """
CREATE TABLE IF NOT EXISTS users (
    user_id     TEXT PRIMARY KEY,
    name        TEXT NOT NULL,
    email       TEXT NOT NULL COLLATE NOCASE,
    created_at  TEXT NOT NULL
);
"""

_USERS_INDEXES = [
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_users_email ON users(email COLLATE NOCASE);",
]

# categories 表 DDL
_CATEGORIES_DDL = """
CREATE TABLE IF NOT EXISTS categories (
    category_id TEXT PRIMARY KEY,
    user_id     TEXT NOT NULL,
    name        TEXT NOT NULL,
    color       TEXT NOT NULL DEFAULT '#6B7280',
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL,

    FOREIGN KEY (user_id) REFERENCES users(user_id) ON DELETE CASCADE
);
"""

_CATEGORIES_INDEXES = [
    (
        "CREATE UNIQUE INDEX IF NOT EXISTS idx_categories_user_name "
        "ON categories(user_id, name COLLATE NOCASE);"
    ),
]

# tasks 表 DDL
_TASKS_DDL = """
CREATE TABLE IF NOT EXISTS tasks (
    task_id     TEXT PRIMARY KEY,
    user_id     TEXT NOT NULL,
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL,
    title       TEXT NOT NULL,
    description TEXT,
    status      TEXT NOT NULL DEFAULT 'pending',
    priority    TEXT NOT NULL DEFAULT 'medium',
    due_date    TEXT,
    completed   INTEGER NOT NULL DEFAULT 0,
    category_id TEXT,
    position    INTEGER NOT NULL DEFAULT 0,

    FOREIGN KEY (user_id) REFERENCES users(user_id) ON DELETE CASCADE,
    FOREIGN KEY (category_id) REFERENCES categories(category_id) ON DELETE SET NULL
);
"""

_TASKS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_user_position ON tasks(user_id, position);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_user_status ON tasks(user_id, status);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_user_priority ON tasks(user_id, priority);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_category_id ON tasks(category_id);",
]

# task_history 表 DDL（append-only，随任务级联删除）
_TASK_HISTORY_DDL = """
CREATE TABLE IF NOT EXISTS task_history (
    history_id  TEXT PRIMARY KEY,
    task_id     TEXT NOT NULL,
    user_id     TEXT NOT NULL,
    task_seq    INTEGER NOT NULL,
    field_name  TEXT NOT NULL,
    old_value   TEXT,
    new_value   TEXT,
    action      TEXT NOT NULL,
    created_at  TEXT NOT NULL,

    FOREIGN KEY (task_id) REFERENCES tasks(task_id) ON DELETE CASCADE,
    FOREIGN KEY (user_id) REFERENCES users(user_id)
);
"""

_TASK_HISTORY_INDEXES = [
    # 任务内序号唯一约束（确保 task_seq 严格单调递增）
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_task_history_seq ON task_history(task_id, task_seq);",
    # 任务内按时间排序索引
    (
        "CREATE INDEX IF NOT EXISTS idx_task_history_task_created "
        "ON task_history(task_id, created_at);"
    ),
    "CREATE INDEX IF NOT EXISTS idx_task_history_field ON task_history(field_name);",
    "CREATE INDEX IF NOT EXISTS idx_task_history_user ON task_history(user_id);",
]

# comments 表 DDL
_COMMENTS_DDL = """
CREATE TABLE IF NOT EXISTS comments (
    comment_id  TEXT PRIMARY KEY,
    task_id     TEXT NOT NULL,
    user_id     TEXT NOT NULL,
    content     TEXT NOT NULL,
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL,
    deleted_at  TEXT,

    FOREIGN KEY (task_id) REFERENCES tasks(task_id) ON DELETE CASCADE,
    FOREIGN KEY (user_id) REFERENCES users(user_id)
);
"""

_COMMENTS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_comments_task ON comments(task_id, deleted_at);",
]


async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化数据库：设置 PRAGMA + 创建表 + 创建索引

    Args:
        conn: aiosqlite 数据库连接
    """
    # 设置 PRAGMA
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA foreign_keys = ON;")
    await conn.execute("PRAGMA busy_timeout = 5000;")

    # 创建表
    await conn.execute(_USERS_DDL)
    await conn.execute(_CATEGORIES_DDL)
    await conn.execute(_TASKS_DDL)
    await conn.execute(_TASK_HISTORY_DDL)
    await conn.execute(_COMMENTS_DDL)

    # 创建索引
    for idx_sql in (
        _USERS_INDEXES
        + _CATEGORIES_INDEXES
        + _TASKS_INDEXES
        + _TASK_HISTORY_INDEXES
        + _COMMENTS_INDEXES
    ):
        await conn.execute(idx_sql)

    await conn.commit()


async def verify_wal_mode(conn: aiosqlite.Connection) -> bool:
    """验证 WAL 模式是否生效

    Returns:
        True 如果 WAL 模式已启用
    """
    cursor = await conn.execute("PRAGMA journal_mode;")
    row = await cursor.fetchone()
    return row is not None and row[0].lower() == "wal"
