"""排序引擎 -- 间隙分数索引（gapped fractional indexing）

为插入或移动到某列的任务计算 position，只写被移动的任务，
不改动同列其他任务已存储的 position。
"""

from collections.abc import Sequence

from .exceptions import PositionExhaustedError

# 基础间隙，足够大以推迟耗尽
GAP: float = 65536.0

# (task_id, position) 对，按 position 升序
SiblingPosition = tuple[str, float]


def append_position(last_position: float | None) -> float:
    """追加到列尾的 position

    Args:
        last_position: 列中最后一个任务的 position，空列为 None

    Returns:
        新 position
    """
    if last_position is None:
        return GAP
    position = last_position + GAP
    if not position > last_position:
        raise PositionExhaustedError(last_position, None)
    return position


def compute_position(
    siblings: Sequence[SiblingPosition],
    target_index: int | None = None,
) -> float:
    """计算任务插入到 target_index 处的 position

    Args:
        siblings: 目标列现有任务（不含被移动任务），按 position 升序
        target_index: 从 0 开始的目标下标；None 表示追加到列尾

    Returns:
        严格位于两个相邻任务之间的 position

    Raises:
        ValueError: target_index 为负数
        PositionExhaustedError: 浮点精度已无法在相邻位置间取值
    """
    if target_index is not None and target_index < 0:
        raise ValueError(f"target_index must be non-negative, got {target_index}")

    if not siblings:
        return GAP

    if target_index is None or target_index >= len(siblings):
        return append_position(siblings[-1][1])

    if target_index == 0:
        first = siblings[0][1]
        position = first / 2
        if not position < first:
            raise PositionExhaustedError(None, first)
        return position

    before = siblings[target_index - 1][1]
    after = siblings[target_index][1]
    position = (before + after) / 2
    if not before < position < after:
        raise PositionExhaustedError(before, after)
    return position


def smallest_gap(positions: Sequence[float]) -> float | None:
    """相邻 position 之间的最小间隙，少于两个元素时返回 None

    用于观察列的间隙余量，本身不触发任何重排。
    """
    if len(positions) < 2:
        return None
    ordered = sorted(positions)
    return min(b - a for a, b in zip(ordered, ordered[1:], strict=False))
