"""
Backup orchestration: report aggregation, copy pipeline and engine entry point.
"""
