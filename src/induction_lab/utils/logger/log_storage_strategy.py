class LogStorageStrategy:
    """
    Base class for lab log storage.
    Subclasses decide where log lines end up.
    """

    # STORE ONE LOG LINE
    def store_log(self, message, priority, timestamp):
        """
        Stores a log message with the given priority and timestamp.

        Parameters:
        message (str): The log message.
        priority (str): Name of the priority level.
        timestamp (str): Formatted time of the entry.

        Raises:
        NotImplementedError: If this method is not overridden in a subclass.
        """
        raise NotImplementedError()

    # DISCARD ALL STORED LINES
    def flush_logs(self):
        """
        Discards all stored log lines.

        Raises:
        NotImplementedError: If this method is not overridden in a subclass.
        """
        raise NotImplementedError()
