"""
Logging setup tests.
"""
import logging
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from rich.logging import RichHandler

from sma16.log_setup import setup_logging


def _drop(logger):
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


class TestSetupLogging:

    def test_rich_console(self):
        logger = setup_logging(name="sma16.test.rich")
        try:
            assert len(logger.handlers) == 1
            assert isinstance(logger.handlers[0], RichHandler)
            assert logger.handlers[0].level == logging.WARNING
        finally:
            _drop(logger)

    def test_plain_console_and_file(self, tmp_path):
        logger = setup_logging(name="sma16.test.file", log_dir=tmp_path,
                               rich_console=False)
        try:
            kinds = {type(h) for h in logger.handlers}
            assert logging.FileHandler in kinds
            assert logging.StreamHandler in kinds
            logger.debug("hello from test")
            for h in logger.handlers:
                h.flush()
            files = list(tmp_path.glob("sma16.test.file_*.log"))
            assert len(files) == 1
            assert "hello from test" in files[0].read_text(encoding="utf-8")
        finally:
            _drop(logger)

    def test_idempotent(self):
        logger = setup_logging(name="sma16.test.twice", rich_console=False)
        try:
            again = setup_logging(name="sma16.test.twice")
            assert again is logger
            assert len(again.handlers) == 1
        finally:
            _drop(logger)
