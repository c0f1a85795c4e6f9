"""
Task subsystem.

Components:
- task_models.py: data structures (Task, enums, TaskFilters, TaskStats)
- slot_store.py: SQLite key-value slots used for persistence
- task_store.py: canonical task list, persistence and undo/redo wiring
- history.py: linear undo/redo log of list snapshots
- recurrence.py: next occurrence of a completed recurring task
- task_views.py: filtering, ordering, stats and streak
- task_scheduler.py: polling scheduler that fires due reminders
- task_api.py: small high-level helpers used by the rest of the app
"""
