"""Unit tests for immutable_base.logging module."""

import logging

import pytest

from immutable_base import DataTransferObject
from immutable_base.exceptions import MissingRequiredFieldException
from immutable_base.logging import (
    COMPONENTS,
    HYDRATOR,
    ROOT_LOGGER,
    SCHEMA,
    UPDATER,
    configure_logging,
    get_logger,
)


class Ticket(DataTransferObject):
    code: str


@pytest.fixture
def library_loggers():
    """Restore the library loggers after a test reconfigures them."""
    loggers = [get_logger()] + [get_logger(c) for c in COMPONENTS]
    saved = [(logger, logger.level, list(logger.handlers)) for logger in loggers]
    yield
    for logger, level, handlers in saved:
        logger.setLevel(level)
        logger.handlers = handlers


class TestGetLogger:
    """Tests for get_logger."""

    def test_root_logger(self):
        assert get_logger().name == ROOT_LOGGER

    def test_component_logger(self):
        assert get_logger(SCHEMA).name == "immutable_base.schema"

    def test_component_is_child_of_root(self):
        assert get_logger(HYDRATOR).parent is get_logger()

    def test_every_component_is_namespaced(self):
        for component in COMPONENTS:
            assert get_logger(component).name.startswith(f"{ROOT_LOGGER}.")


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_sets_root_level(self, library_loggers):
        root = configure_logging(level=logging.DEBUG)
        assert root is get_logger()
        assert root.level == logging.DEBUG

    def test_attaches_given_handler(self, library_loggers):
        get_logger().handlers = []
        handler = logging.StreamHandler()
        root = configure_logging(handler=handler)
        assert root.handlers == [handler]
        assert handler.formatter is not None

    def test_keeps_existing_handler(self, library_loggers):
        get_logger().handlers = []
        first = logging.StreamHandler()
        configure_logging(handler=first)
        configure_logging(handler=logging.StreamHandler())
        assert get_logger().handlers == [first]

    def test_tunes_only_named_components(self, library_loggers):
        get_logger().setLevel(logging.WARNING)
        configure_logging(level=logging.DEBUG, components=(UPDATER,))
        assert get_logger(UPDATER).level == logging.DEBUG
        assert get_logger().level == logging.WARNING
        assert get_logger(SCHEMA).getEffectiveLevel() == logging.WARNING


class TestEngineLogging:
    """Engine components log through their own loggers."""

    def test_hydration_failure_is_logged(self, caplog):
        caplog.set_level(logging.DEBUG, logger=get_logger(HYDRATOR).name)
        with pytest.raises(MissingRequiredFieldException):
            Ticket.from_dict({})
        records = [r for r in caplog.records if r.name == "immutable_base.hydrator"]
        assert records
        assert "Ticket" in records[0].getMessage()
