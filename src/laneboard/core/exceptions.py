"""看板异常体系

所有业务异常携带 code / status_code / retryable，
由 gateway 的异常处理器统一渲染为 {"error": {...}} 响应体。
"""


class BoardError(Exception):
    """看板业务基础异常"""

    code = "BOARD_ERROR"
    status_code = 500
    retryable = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(BoardError):
    """引用的资源不存在，客户端错误，不应重试"""

    code = "NOT_FOUND"
    status_code = 404


class TaskNotFoundError(NotFoundError):
    code = "TASK_NOT_FOUND"

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task with id {task_id} does not exist")
        self.task_id = task_id


class StatusNotFoundError(NotFoundError):
    code = "STATUS_NOT_FOUND"

    def __init__(self, status_id: str) -> None:
        super().__init__(f"Status with id {status_id} does not exist")
        self.status_id = status_id


class SpaceNotFoundError(NotFoundError):
    code = "SPACE_NOT_FOUND"

    def __init__(self, space_id: str) -> None:
        super().__init__(f"Space with id {space_id} does not exist")
        self.space_id = space_id


class ConflictError(BoardError):
    """请求与当前数据状态冲突"""

    code = "CONFLICT"
    status_code = 409


class StatusSpaceMismatchError(ConflictError):
    """目标列不属于任务所在的 space"""

    code = "STATUS_SPACE_MISMATCH"

    def __init__(self, status_id: str, space_id: str) -> None:
        super().__init__(
            f"Status {status_id} does not belong to space {space_id}"
        )
        self.status_id = status_id
        self.space_id = space_id


class CrossSpaceMoveError(StatusSpaceMismatchError):
    """移动任务到其他 space 的列"""

    code = "CROSS_SPACE_MOVE"


class SpaceKeyConflictError(ConflictError):
    code = "SPACE_KEY_CONFLICT"

    def __init__(self, key: str) -> None:
        super().__init__(f'Space key "{key}" already exists')
        self.key = key


class PositionExhaustedError(ConflictError):
    """相邻 position 之间已无可用的浮点数间隙

    不做自动重排，调用方只能换一个插入位置。
    """

    code = "POSITION_EXHAUSTED"

    def __init__(self, before: float | None, after: float | None) -> None:
        super().__init__(
            f"No position left between {before} and {after}"
        )
        self.before = before
        self.after = after


class ConcurrentMoveError(ConflictError):
    """并发修改导致重试耗尽，可由调用方整体重试"""

    code = "CONCURRENT_MODIFICATION"
    retryable = True

    def __init__(self, task_id: str, attempts: int) -> None:
        super().__init__(
            f"Task {task_id} was modified concurrently, gave up after {attempts} attempts"
        )
        self.task_id = task_id
        self.attempts = attempts


class TransientWriteError(BoardError):
    """存储暂时不可写（锁等待、忙），可安全重试"""

    code = "TRANSIENT_WRITE_FAILURE"
    status_code = 503
    retryable = True


class MoveTimeoutError(TransientWriteError):
    code = "MOVE_TIMEOUT"

    def __init__(self, task_id: str, timeout_s: float) -> None:
        super().__init__(f"Move of task {task_id} exceeded {timeout_s}s")
        self.task_id = task_id
        self.timeout_s = timeout_s


class PersistenceError(BoardError):
    """底层存储不可用，本次请求失败，无部分提交"""

    code = "PERSISTENCE_FAILURE"
    status_code = 503
