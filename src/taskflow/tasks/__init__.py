"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Category, TaskDraft, FilterState, ...)
- mapper.py: record store field encodings <-> domain objects
- repositories.py: task/category façades over the record store
- engine.py: list engine (derived view, stats, mutations with reload)
"""
