# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKTRACKER_APP_NAME": "App display name (default: task-tracker).",
    "TASKTRACKER_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Paths (gitignored)
    "TASKTRACKER_DATA_DIR": "Local data directory (default: .local/task_tracker).",
    "TASKTRACKER_STORE_DB_PATH": "Key-value SQLite path (default: <data_dir>/store.sqlite3).",
    "TASKTRACKER_STORAGE_KEY": "Key holding the serialized task list (default: tasks).",
    # Reminders
    "TASKTRACKER_NOTIFICATIONS_ENABLED": "Allow reminders at all (true/false, default: true).",
    "TASKTRACKER_NOTIFICATION_SINK": "How reminders are shown: console | desktop (notify-send).",
    "TASKTRACKER_AUTO_GRANT": "Skip the permission prompt and grant (true/false, default: false).",
}
