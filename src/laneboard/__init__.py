"""LaneBoard -- 看板任务排序、移动事务与实时同步"""

__version__ = "0.1.0"
