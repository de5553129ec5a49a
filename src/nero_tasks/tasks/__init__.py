"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskPriority, SortKey)
- task_store.py: SQLite-backed storage with a write-through in-memory map
- task_lists.py: smart list predicates, ordering, Upcoming buckets, Anytime groups
- task_stats.py: Completed list statistics and time-period filters
- task_actions.py: the action layer, the only code path that mutates tasks
"""
