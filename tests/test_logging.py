"""Tests for logger setup."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from dartsweep.logging import ROOT_LOGGER, configure_logging, get_logger


@pytest.fixture(autouse=True)
def _restore_root_logger():
    logger = logging.getLogger(ROOT_LOGGER)
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    handlers, level, propagate = saved
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = propagate


def test_get_logger_nests_components_under_root() -> None:
    assert get_logger().name == "dartsweep"
    assert get_logger("scanner").name == "dartsweep.scanner"


def test_reconfigure_closes_previous_file_handler(tmp_path: Path) -> None:
    first = configure_logging(log_file=tmp_path / "first.log")
    sink = next(h for h in first.handlers if isinstance(h, logging.FileHandler))

    second = configure_logging(verbose=True)

    assert sink.stream is None
    assert sink not in second.handlers
    assert len(second.handlers) == 1
    assert second.level == logging.DEBUG


def test_log_file_receives_component_records(tmp_path: Path) -> None:
    log_file = tmp_path / "run.log"
    configure_logging(log_file=log_file)

    get_logger("graph").info("reachable %d", 3)
    for handler in logging.getLogger(ROOT_LOGGER).handlers:
        handler.flush()

    assert "dartsweep.graph: reachable 3" in log_file.read_text(encoding="utf-8")
