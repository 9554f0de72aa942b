"""LaneBoard Gateway -- FastAPI 应用、移动事务与实时推送"""
