# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKKEEPER_APP_NAME": "App display name (default: taskkeeper).",
    "TASKKEEPER_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Connectors
    "TASKKEEPER_CONSOLE_ENABLED": "Start the interactive console when no command is given (true/false).",
    # Paths
    "TASKKEEPER_DATA_DIR": "Local data directory (default: .local/taskkeeper).",
    "TASKKEEPER_TASKS_FILE": "Task snapshot JSON file (default: <DATA_DIR>/tasks.json).",
    "TASKKEEPER_LOG_DIR": "Directory for taskkeeper.log (default: <DATA_DIR>).",
}
