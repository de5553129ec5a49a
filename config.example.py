# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Put local values into `.env` (gitignored); every variable below is optional.

This file exists to make the repo self-documenting without opening src/nero_tasks/config.py.
"""

ENV_VARS = {
    # App / logging
    "NERO_APP_NAME": "App display name (default: nero).",
    "NERO_LOG_LEVEL": "Level of the file log <data_dir>/nero.log (default: INFO).",
    # Console
    "NERO_CONSOLE_ENABLED": "Run the interactive console (true/false, default: true).",
    "NERO_CONFIRM_BEFORE_DELETE": "Require '/rm <n> yes' to delete (true/false, default: true).",
    # Task defaults
    "NERO_DEFAULT_DUE_TIME": "Time used when a due date is given without one (HH:MM, default: 09:00).",
    # Paths (gitignored)
    "NERO_DATA_DIR": "Local data directory (default: .local/nero).",
    "NERO_TASKS_DB_PATH": "TaskStore SQLite path (default: <data_dir>/tasks.sqlite3).",
}
