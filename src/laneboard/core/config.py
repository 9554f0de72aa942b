"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径、移动事务超时与重试次数、实时推送参数等可配置常量。
"""

import os
from pathlib import Path


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("LANEBOARD_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "LANEBOARD_DB_PATH",
        str(_get_base_dir() / "sqlite" / "laneboard.db"),
    )


def get_default_actor() -> str:
    """获取默认操作者 ID（请求未携带 X-Actor-Id 时使用）"""
    return os.environ.get("LANEBOARD_DEFAULT_ACTOR", "demo-user")


# 移动事务的最长等待时间（秒），包含等待事务锁的时间
MOVE_TX_TIMEOUT_S: float = float(
    os.environ.get("LANEBOARD_MOVE_TX_TIMEOUT_S", "5")
)

# compare-and-set 冲突时整体重试的最大次数
MOVE_MAX_RETRIES: int = int(os.environ.get("LANEBOARD_MOVE_MAX_RETRIES", "3"))

# SSE 心跳间隔（秒）
SSE_HEARTBEAT_INTERVAL: int = int(
    os.environ.get("LANEBOARD_SSE_HEARTBEAT_INTERVAL", "15")
)

# 每个订阅者的队列容量，写满即视为慢消费者并断开
REALTIME_QUEUE_MAXSIZE: int = int(
    os.environ.get("LANEBOARD_REALTIME_QUEUE_MAXSIZE", "100")
)

# 任务标题最大长度
TASK_TITLE_MAX_LENGTH: int = 255
