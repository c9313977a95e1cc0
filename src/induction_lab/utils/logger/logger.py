import os
import threading
from datetime import datetime
from enum import Enum

from .local_file_strategy import LocalFileStrategy


class Logger:
    """
    Process-wide lab logger.
    Static class: call Logger.log(...) from anywhere once a storage strategy is set.
    """

    class LogPriority(Enum):
        DEBUG = 1
        INFO = 2
        WARNING = 3
        ERROR = 4
        CRITICAL = 5

    DEFAULT_LOG_PATH = "/tmp/induction_lab_logs.txt"
    LOG_PATH_ENV = "INDUCTION_LAB_LOG_PATH"

    is_logging_enabled = True
    log_storage_strategy = None
    _log_lock = threading.RLock()
    _strategy_lock = threading.Lock()
    _initialize_lock = threading.Lock()

    # INITIALIZE WITH FILE STORAGE UNLESS A STRATEGY IS ALREADY SET
    @classmethod
    def initialize(cls):
        """
        Sets file storage at $INDUCTION_LAB_LOG_PATH (or the default path)
        when no storage strategy has been configured yet.
        """
        with cls._initialize_lock:
            if cls.log_storage_strategy is None:
                file_location = os.getenv(cls.LOG_PATH_ENV, cls.DEFAULT_LOG_PATH)
                cls.set_log_storage_strategy(LocalFileStrategy(file_location))
                cls.log(f"Logger initialized with file storage at {file_location}.", cls.LogPriority.INFO)

    # LOG WITH MESSAGE AND PRIORITY
    @classmethod
    def log(cls, message, priority=LogPriority.DEBUG):
        """
        Stores a message through the current strategy. No-op while disabled
        or before a strategy is set.

        Parameters:
        message (str): The log message.
        priority (LogPriority): Priority level (default DEBUG).
        """
        with cls._log_lock:
            if cls.is_logging_enabled and cls.log_storage_strategy:
                cls.log_storage_strategy.store_log(
                    message, priority.name, datetime.now().strftime("%Y-%m-%d %H:%M:%S")
                )

    @classmethod
    def set_log_storage_strategy(cls, log_storage_strategy):
        with cls._strategy_lock:
            cls.log_storage_strategy = log_storage_strategy

    @classmethod
    def flush_logs(cls):
        with cls._log_lock:
            if cls.is_logging_enabled and cls.log_storage_strategy:
                cls.log_storage_strategy.flush_logs()

    @classmethod
    def disable_logging(cls):
        with cls._log_lock:
            cls.log("Logging disabled")
            cls.is_logging_enabled = False

    @classmethod
    def enable_logging(cls):
        with cls._log_lock:
            cls.is_logging_enabled = True
            cls.log("Logging enabled")
