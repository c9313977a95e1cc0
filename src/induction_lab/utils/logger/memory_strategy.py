from .log_storage_strategy import LogStorageStrategy


class MemoryStrategy(LogStorageStrategy):
    """
    Keeps log lines in a list. Used by tests and embedding UIs that show
    the lab log in a panel.
    """

    def __init__(self, max_entries=10000):
        self.max_entries = max_entries
        self.entries = []

    def store_log(self, message, priority, timestamp):
        self.entries.append((timestamp, priority, message))
        if len(self.entries) > self.max_entries:
            del self.entries[0]

    def flush_logs(self):
        self.entries.clear()

    def messages(self):
        """Stored messages without timestamps, oldest first."""
        return [message for _, _, message in self.entries]
