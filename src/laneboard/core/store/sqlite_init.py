"""SQLite 数据库初始化

PRAGMA 配置 + 四张表 DDL + 索引创建。
使用 aiosqlite 异步操作。
"""

import aiosqlite

_SPACES_DDL = """
CREATE TABLE IF NOT EXISTS spaces (
    space_id    TEXT PRIMARY KEY,
    key         TEXT NOT NULL UNIQUE,
    name        TEXT NOT NULL,
    created_at  TEXT NOT NULL
);
"""

# statuses 即看板列
_STATUSES_DDL = """
CREATE TABLE IF NOT EXISTS statuses (
    status_id   TEXT PRIMARY KEY,
    space_id    TEXT NOT NULL,
    name        TEXT NOT NULL,
    slug        TEXT NOT NULL,
    color       TEXT NOT NULL DEFAULT '#6B7280',
    position    INTEGER NOT NULL DEFAULT 0,
    category    TEXT NOT NULL DEFAULT 'TODO',

    FOREIGN KEY (space_id) REFERENCES spaces(space_id)
);
"""

_STATUSES_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_statuses_space ON statuses(space_id, position);",
]

_TASKS_DDL = """
CREATE TABLE IF NOT EXISTS tasks (
    task_id      TEXT PRIMARY KEY,
    space_id     TEXT NOT NULL,
    status_id    TEXT NOT NULL,
    position     REAL NOT NULL,
    key          TEXT NOT NULL,
    number       INTEGER NOT NULL,
    title        TEXT NOT NULL DEFAULT '',
    description  TEXT NOT NULL DEFAULT '',
    created_at   TEXT NOT NULL,
    updated_at   TEXT NOT NULL,

    FOREIGN KEY (space_id) REFERENCES spaces(space_id),
    FOREIGN KEY (status_id) REFERENCES statuses(status_id)
);
"""

_TASKS_INDEXES = [
    # 列内按 position 的范围查询
    "CREATE INDEX IF NOT EXISTS idx_tasks_column ON tasks(space_id, status_id, position);",
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_tasks_key ON tasks(key);",
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_tasks_space_number ON tasks(space_id, number);",
]

# activities 只追加；不引用 tasks，任务删除后审计记录保留
_ACTIVITIES_DDL = """
CREATE TABLE IF NOT EXISTS activities (
    activity_id  TEXT PRIMARY KEY,
    task_id      TEXT NOT NULL,
    actor_id     TEXT NOT NULL,
    action       TEXT NOT NULL,
    field        TEXT,
    old_value    TEXT,
    new_value    TEXT,
    ts           TEXT NOT NULL
);
"""

_ACTIVITIES_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_activities_task_ts ON activities(task_id, ts);",
]


async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化数据库：设置 PRAGMA + 创建表 + 创建索引

    Args:
        conn: aiosqlite 数据库连接
    """
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA foreign_keys = ON;")
    await conn.execute("PRAGMA busy_timeout = 5000;")

    await conn.execute(_SPACES_DDL)
    await conn.execute(_STATUSES_DDL)
    await conn.execute(_TASKS_DDL)
    await conn.execute(_ACTIVITIES_DDL)

    for idx_sql in _STATUSES_INDEXES + _TASKS_INDEXES + _ACTIVITIES_INDEXES:
        await conn.execute(idx_sql)

    await conn.commit()


async def verify_wal_mode(conn: aiosqlite.Connection) -> bool:
    """验证 WAL 模式是否生效"""
    cursor = await conn.execute("PRAGMA journal_mode;")
    row = await cursor.fetchone()
    return row is not None and row[0].lower() == "wal"
