"""LaneBoard Core -- 领域模型、排序引擎与 SQLite 持久化"""
