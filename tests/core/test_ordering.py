"""排序引擎单元测试

测试内容：
1. 空列、列尾、列首、中间插入的 position 计算
2. 插入后按 position 排序的顺序保持
3. 浮点间隙耗尽时拒绝写入
"""

import math

import pytest
from laneboard.core.exceptions import PositionExhaustedError
from laneboard.core.ordering import GAP, append_position, compute_position, smallest_gap


def _siblings(*positions: float) -> list[tuple[str, float]]:
    return [(f"t{i}", p) for i, p in enumerate(positions)]


class TestComputePosition:
    def test_empty_column_uses_base_gap(self):
        assert compute_position([], 0) == 65536
        assert compute_position([]) == GAP

    def test_append_when_index_omitted(self):
        assert compute_position(_siblings(100, 200)) == 200 + GAP

    def test_index_past_end_appends(self):
        assert compute_position(_siblings(100, 200), 2) == 200 + GAP
        assert compute_position(_siblings(100, 200), 99) == 200 + GAP

    def test_head_is_half_of_first(self):
        assert compute_position(_siblings(100, 200), 0) == 50

    def test_middle_is_midpoint(self):
        """A(100), B(200) 之间插入 -> 150"""
        assert compute_position([("A", 100.0), ("B", 200.0)], 1) == 150

    def test_negative_index_rejected(self):
        with pytest.raises(ValueError):
            compute_position(_siblings(100), -1)


class TestPositionExhausted:
    def test_adjacent_floats(self):
        before = 1.0
        after = math.nextafter(1.0, 2.0)
        with pytest.raises(PositionExhaustedError) as exc_info:
            compute_position(_siblings(before, after), 1)
        assert exc_info.value.before == before
        assert exc_info.value.after == after
        assert exc_info.value.retryable is False

    def test_duplicate_positions(self):
        with pytest.raises(PositionExhaustedError):
            compute_position(_siblings(5.0, 5.0), 1)

    def test_head_at_zero(self):
        with pytest.raises(PositionExhaustedError):
            compute_position(_siblings(0.0, 10.0), 0)

    def test_append_on_huge_position(self):
        with pytest.raises(PositionExhaustedError):
            append_position(1e300)


class TestOrderPreservation:
    """在下标 i 插入后，按 position 排序新任务恰好位于 i，其余相对顺序不变"""

    @pytest.mark.parametrize("count", [0, 1, 2, 3, 5])
    def test_insert_at_every_index(self, count: int):
        existing = _siblings(*[GAP * (k + 1) for k in range(count)])
        for index in range(count + 1):
            position = compute_position(existing, index)
            ordered = sorted([*existing, ("new", position)], key=lambda s: s[1])
            ids = [task_id for task_id, _ in ordered]
            assert ids.index("new") == index
            assert [i for i in ids if i != "new"] == [t for t, _ in existing]

    def test_repeated_head_inserts(self):
        column = _siblings(GAP)
        for n in range(40):
            column.insert(0, (f"h{n}", compute_position(column, 0)))
        positions = [p for _, p in column]
        assert positions == sorted(positions)
        assert len(set(positions)) == len(positions)

    def test_repeated_midpoint_inserts_shrink_gap(self):
        column = _siblings(GAP, 2 * GAP)
        for n in range(20):
            column.insert(1, (f"m{n}", compute_position(column, 1)))
        positions = [p for _, p in column]
        assert positions == sorted(positions)
        assert smallest_gap(positions) < GAP / 2**19


class TestAppendPosition:
    def test_empty(self):
        assert append_position(None) == GAP

    def test_after_last(self):
        assert append_position(100.0) == 100.0 + GAP


class TestSmallestGap:
    def test_fewer_than_two(self):
        assert smallest_gap([]) is None
        assert smallest_gap([1.0]) is None

    def test_unsorted_input(self):
        assert smallest_gap([300.0, 100.0, 250.0]) == 50.0
