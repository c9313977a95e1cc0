import os
from datetime import datetime

from .log_storage_strategy import LogStorageStrategy


class LocalFileStrategy(LogStorageStrategy):
    """
    Appends lab log lines to a local text file.
    """

    # OPEN OR CREATE THE LOG FILE
    def __init__(self, file_location):
        """
        Args:
            file_location (str): Log file path, relative paths resolve against the cwd.
        """
        self.file_location = self.resolve_file_path(file_location)
        self.initialize_log_file()

    # RESOLVE TO AN ABSOLUTE PATH AND CREATE PARENT DIRECTORIES
    def resolve_file_path(self, file_location):
        if not os.path.isabs(file_location):
            file_location = os.path.join(os.getcwd(), file_location)

        dir_name = os.path.dirname(file_location)
        if dir_name and not os.path.exists(dir_name):
            os.makedirs(dir_name)

        return file_location

    # START A FRESH FILE FOR THIS SESSION
    def initialize_log_file(self):
        if os.path.exists(self.file_location):
            self.flush_logs()
        else:
            with open(self.file_location, 'w', encoding='utf-8') as log_file:
                log_file.write(f"LOG INITIALIZATION: {datetime.now()}\n")

    def store_log(self, message, priority, timestamp):
        with open(self.file_location, 'a', encoding='utf-8') as log_file:
            log_file.write(f"[{timestamp}] [{priority}] {message}\n")

    def flush_logs(self):
        with open(self.file_location, 'w', encoding='utf-8') as log_file:
            log_file.write(f"LOG FLUSHED: {datetime.now()}\n")
