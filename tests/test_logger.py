"""Test logging setup"""

import logging

from mxlyrics.utils.logger import (
    ConsoleMessageFilter,
    parse_size,
    setup_logging,
    get_logger,
    get_current_log_file
)


class TestLogger:
    """Test logger configuration helpers"""

    def test_file_logging(self, temp_dir):
        log_file = temp_dir / "logs" / "mxlyrics.log"
        setup_logging(level="DEBUG", log_file=str(log_file), console_output=False)
        root_logger = logging.getLogger()

        try:
            get_logger("mxlyrics.test").info("written to file")
            assert get_current_log_file() == log_file
            for handler in root_logger.handlers:
                handler.flush()
            assert "written to file" in log_file.read_text()
        finally:
            for handler in list(root_logger.handlers):
                handler.close()
                root_logger.removeHandler(handler)

    def test_console_filter(self):
        console_filter = ConsoleMessageFilter()

        info = logging.LogRecord("mxlyrics.x", logging.INFO, "", 0, "hi", None, None)
        assert not console_filter.filter(info)

        info.console_output = True
        assert console_filter.filter(info)

        warning = logging.LogRecord("mxlyrics.x", logging.WARNING, "", 0, "hi", None, None)
        assert console_filter.filter(warning)

    def test_parse_size(self):
        assert parse_size("10MB") == 10 * 1024 * 1024
        assert parse_size("512KB") == 512 * 1024

    def test_console_info_helper(self):
        logger = get_logger("mxlyrics.test")
        assert callable(logger.console_info)
