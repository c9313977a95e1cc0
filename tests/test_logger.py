"""
Tests for the lab logger.
"""

import os
import tempfile

from induction_lab.config import LabConfig
from induction_lab.controller import LabController
from induction_lab.utils.logger import LocalFileStrategy, Logger, MemoryStrategy


class TestLogger:

    def test_log_goes_to_strategy(self, memory_log):
        Logger.log("hello", Logger.LogPriority.INFO)
        timestamp, priority, message = memory_log.entries[-1]
        assert message == "hello"
        assert priority == "INFO"

    def test_disable_and_enable(self, memory_log):
        Logger.disable_logging()
        Logger.log("hidden")
        Logger.enable_logging()
        Logger.log("shown")

        messages = memory_log.messages()
        assert "hidden" not in messages
        assert "shown" in messages

    def test_no_strategy_is_noop(self):
        Logger.set_log_storage_strategy(None)
        Logger.log("nowhere")

    def test_memory_strategy_bounded(self):
        strategy = MemoryStrategy(max_entries=3)
        for i in range(5):
            strategy.store_log(str(i), "DEBUG", "now")
        assert strategy.messages() == ["2", "3", "4"]

    def test_file_strategy(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "logs", "lab.txt")
            strategy = LocalFileStrategy(path)
            strategy.store_log("written", "INFO", "2024-01-01 00:00:00")

            with open(path, encoding="utf-8") as f:
                content = f.read()
            assert "[2024-01-01 00:00:00] [INFO] written" in content

    def test_initialize_uses_env_path(self, monkeypatch):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "env_log.txt")
            monkeypatch.setenv(Logger.LOG_PATH_ENV, path)
            Logger.set_log_storage_strategy(None)

            Logger.initialize()

            assert isinstance(Logger.log_storage_strategy, LocalFileStrategy)
            assert Logger.log_storage_strategy.file_location == path
            Logger.set_log_storage_strategy(None)

    def test_dropped_frame_logged(self, memory_log):
        controller = LabController(LabConfig())
        controller.tick(0.5)
        assert any("Dropped frame" in m for m in memory_log.messages())
