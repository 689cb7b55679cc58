"""
Task subsystem.

Components:
- task_models.py: data structures (TaskRecord, TaskPatch, TaskStatus, sentinels)
- task_query.py: QueryDescriptor + parameterized SQL rendering
- retry.py: fixed-attempt / fixed-delay retry executor
- task_store.py: SQLite-backed storage (TaskDAO)
- task_persistence.py: retry-then-degrade facade used by the task tracker
"""
