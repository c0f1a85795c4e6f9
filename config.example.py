# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Use:
- .env (local, gitignored)
- config_local.py (local safe overrides, gitignored)

This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "TASKDECK_APP_NAME": "App display name (default: taskdeck).",
    "TASKDECK_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Switches
    "TASKDECK_CONSOLE_ENABLED": "Enable the interactive console (true/false, default: true).",
    "TASKDECK_REMINDERS_ENABLED": "Run the reminder loop in the background (true/false, default: true).",
    # Paths (gitignored)
    "TASKDECK_DATA_DIR": "Local data directory, also holds taskdeck.log (default: .local/taskdeck).",
    "TASKDECK_DB_PATH": "SQLite slot store path (default: <data_dir>/taskdeck.sqlite3).",
    "TASKDECK_STORAGE_KEY": "Slot key the task list is stored under (default: todo-tasks).",
    # History
    "TASKDECK_HISTORY_LIMIT": "Max undo snapshots kept in memory; 0 means unbounded (default: 0).",
    # Reminders (window should be at least as wide as the interval)
    "TASKDECK_REMINDER_INTERVAL_SECONDS": "Reminder poll interval (default: 10).",
    "TASKDECK_REMINDER_LEAD_SECONDS": "Fire up to this many seconds before reminder time (default: 30).",
    "TASKDECK_REMINDER_GRACE_SECONDS": "Still fire up to this many seconds after reminder time (default: 60).",
}
