# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real credentials. Put them in .env (local, gitignored).

This file keeps the repo self-documenting without opening src/taskflow/config.py.
"""

ENV_VARS = {
    # App / logging
    "TASKFLOW_APP_NAME": "App display name (default: TaskFlow).",
    "TASKFLOW_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    "TASKFLOW_DATA_DIR": "Local data directory for taskflow.log (default: .local/taskflow).",
    # Record store
    "TASKFLOW_PROJECT_ID": "Record store project id (PROJECT_ID is accepted too).",
    "TASKFLOW_PUBLIC_KEY": "Record store public key (PUBLIC_KEY is accepted too).",
    "TASKFLOW_API_BASE_URL": "Record store base URL (default: https://api.records.example.com/v1).",
    "TASKFLOW_CONNECT_TIMEOUT_SECONDS": "HTTP connect timeout (default: 5).",
    "TASKFLOW_READ_TIMEOUT_SECONDS": "HTTP read timeout (default: 20, never below the connect timeout).",
    "TASKFLOW_TASK_TABLE": "Task table name (default: task).",
    "TASKFLOW_CATEGORY_TABLE": "Category table name (default: category).",
    # Behaviour
    "TASKFLOW_DEFAULT_CATEGORY": "Category for new tasks and for records without one (default: development).",
    "TASKFLOW_OFFLINE": "Use the seeded in-memory demo store instead of the API (true/false).",
}
