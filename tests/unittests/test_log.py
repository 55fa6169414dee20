# This file is part of wslip. See LICENSE file for license information.

import logging

import pytest

from wslip import log


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
    root.setLevel(level)


class TestSetupBasicLogging:
    def test_handler_is_replaced(self, root_logger):
        log.setup_basic_logging(logging.INFO)
        log.setup_basic_logging(logging.DEBUG)
        ours = [
            h
            for h in root_logger.handlers
            if getattr(h, "_wslip_console", False)
        ]
        assert 1 == len(ours)
        assert logging.DEBUG == ours[0].level
        assert logging.DEBUG == root_logger.level


class TestLevelFromName:
    @pytest.mark.parametrize(
        "name,level",
        [
            ("debug", logging.DEBUG),
            ("WARNING", logging.WARNING),
            ("nonsense", logging.WARNING),
        ],
    )
    def test_level_from_name(self, name, level):
        assert level == log.level_from_name(name)


class TestLogexc:
    def test_logexc(self, caplog):
        logger = logging.getLogger("wslip.test")
        with caplog.at_level(logging.DEBUG):
            try:
                raise ValueError("boom")
            except ValueError:
                log.logexc(logger, "assign %s failed", "ubuntu")
        assert ["assign ubuntu failed"] * 2 == [
            r.getMessage() for r in caplog.records
        ]
        assert caplog.records[1].exc_info is not None


class TestError:
    def test_error_returns_rc(self, capsys):
        assert 1 == log.error("bad gateway")
        assert "Error: bad gateway\n" == capsys.readouterr().err

    def test_error_exits(self):
        with pytest.raises(SystemExit) as excinfo:
            log.error("bad gateway", rc=3, sys_exit=True)
        assert 3 == excinfo.value.code
