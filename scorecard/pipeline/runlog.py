import re
from datetime import datetime, timedelta

from scorecard import config


def trim_log_by_time(log_path, retention_days=14):
    """
    Remove log entries older than retention_days.
    Returns list of lines to keep.
    """
    if not log_path.exists():
        return []

    cutoff = datetime.utcnow() - timedelta(days=retention_days)
    cutoff_str = cutoff.strftime("%Y-%m-%d %H:%M:%S")

    kept_lines = []
    current_entry_recent = False

    with open(log_path, "r") as f:
        for line in f:
            match = re.match(r"\[(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})\]", line)
            if match:
                current_entry_recent = match.group(1) >= cutoff_str

            if current_entry_recent:
                kept_lines.append(line)

    return kept_lines


class RunLog:
    """
    Console + file log for one script run.
    Messages print immediately; save() appends the run to the script's log
    file after dropping entries older than the retention window.
    """

    def __init__(self, name):
        self.name = name
        self.lines = []
        self.warnings = 0
        self.errors = 0

    @property
    def path(self):
        return config.LOGS_DIR / f"{self.name}-log.txt"

    def log(self, message, level="INFO"):
        timestamp = datetime.utcnow().strftime("%Y-%m-%d %H:%M:%S")
        print(message)
        self.lines.append(f"[{timestamp}] [{level}] {message}")
        if level == "WARNING":
            self.warnings += 1
        elif level == "ERROR":
            self.errors += 1

    def save(self, retention_days=None):
        retention_days = retention_days or config.LOG_RETENTION_DAYS
        existing_log = trim_log_by_time(self.path, retention_days=retention_days)
        log_content = existing_log + ["\n--- New Run ---\n"] + [line + "\n" for line in self.lines]

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            f.writelines(log_content)
        print(f"Log saved to {self.path}")
        return self.path
