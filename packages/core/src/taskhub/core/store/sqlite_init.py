"""SQLite 数据库初始化

PRAGMA 配置 + tasks 表 DDL + 索引创建。
使用 aiosqlite 异步操作。
"""

import aiosqlite


def _casefold(value: str | None) -> str | None:
    return value.casefold() if value is not None else None


# tasks 表 DDL
# 时间列统一存 UTC ISO-8601（微秒精度），保证字符串比较与时间顺序一致
_TASKS_DDL = """
CREATE TABLE IF NOT EXISTS tasks (
    task_id          TEXT PRIMARY KEY,
    title            TEXT NOT NULL CHECK (title <> ''),
    description      TEXT,
    type             TEXT NOT NULL DEFAULT 'Reminder',
    status           TEXT NOT NULL DEFAULT 'Pending',
    priority         TEXT NOT NULL DEFAULT 'Medium',
    due_date         TEXT NOT NULL,
    assigned_to      TEXT NOT NULL CHECK (assigned_to <> ''),
    contributors     TEXT NOT NULL DEFAULT '[]',
    created_by       TEXT NOT NULL CHECK (created_by <> ''),
    updated_by       TEXT,
    deleted_by       TEXT,
    organization_id  TEXT NOT NULL CHECK (organization_id <> ''),
    lead_id          TEXT,
    deal_id          TEXT,
    contact_id       TEXT,
    event_id         TEXT,
    note_id          TEXT,
    mail_id          TEXT,
    linked_task_id   TEXT,
    created_at       TEXT NOT NULL,
    updated_at       TEXT NOT NULL
);
"""

_TASKS_INDEXES = [
    # 逾期扫描：status + due_date 范围查询
    "CREATE INDEX IF NOT EXISTS idx_tasks_status_due ON tasks(status, due_date);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_due_date ON tasks(due_date DESC);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_organization ON tasks(organization_id);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_assigned_to ON tasks(assigned_to);",
    # 跨实体关联过滤
    "CREATE INDEX IF NOT EXISTS idx_tasks_lead_id ON tasks(lead_id);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_deal_id ON tasks(deal_id);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_contact_id ON tasks(contact_id);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_event_id ON tasks(event_id);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_note_id ON tasks(note_id);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_mail_id ON tasks(mail_id);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_linked_task_id ON tasks(linked_task_id);",
]


async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化数据库：设置 PRAGMA + 注册 SQL 函数 + 创建表 + 创建索引

    SQL 函数按连接注册，每个新连接都必须经过 init_db。

    Args:
        conn: aiosqlite 数据库连接
    """
    # 设置 PRAGMA
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA busy_timeout = 5000;")

    # 搜索用的 Unicode 大小写折叠；SQLite 内置 LIKE 只折叠 ASCII
    await conn.create_function("casefold", 1, _casefold, deterministic=True)

    # 创建表
    await conn.execute(_TASKS_DDL)

    # 创建索引
    for idx_sql in _TASKS_INDEXES:
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
