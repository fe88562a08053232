"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus) + lifecycle functions
- rwlock.py: in-process reader/writer lock
- task_store.py: JSON-snapshot storage + query helpers
- task_api.py: Result-returning helpers used by the rest of the app
"""
