"""
Tests for logging setup.

The Azure queue is the only mocked collaborator.
"""

import logging
from unittest.mock import MagicMock, patch

import pytest

from retail_tenancy_core.context.tenant_context import ThreadLocalTenantContextStore
from retail_tenancy_core.utils.json_utils import loads
from retail_tenancy_core.utils.logger import (
    LOGGER_NAME,
    AzureQueueHandler,
    ContextAwareLogger,
    TenantContextFilter,
    configure_logging,
    get_logger,
)


def _record(msg="hello", **extra):
    record = logging.LogRecord(LOGGER_NAME, logging.INFO, __file__, 10, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestContextAwareLogger:
    def test_extras_are_appended(self, caplog):
        caplog.set_level(logging.INFO, logger=LOGGER_NAME)
        logger = ContextAwareLogger(logging.getLogger(LOGGER_NAME))

        logger.info("Created Store", extra={"record_id": 3, "tenant_id": 1})

        assert "Created Store | record_id=3 | tenant_id=1" in caplog.messages

    def test_get_logger_falls_back_to_package_logger(self):
        logger = get_logger()

        assert isinstance(logger, ContextAwareLogger)
        assert logger.logger.name == LOGGER_NAME


class TestTenantContextFilter:
    def test_stamps_bound_tenant(self):
        store = ThreadLocalTenantContextStore()
        store.set(42)
        record = _record()

        assert TenantContextFilter().filter(record) is True
        assert record.tenant_id == 42

    def test_no_tenant_bound(self):
        record = _record()

        TenantContextFilter(ThreadLocalTenantContextStore()).filter(record)

        assert not hasattr(record, "tenant_id")


class TestAzureQueueHandler:
    @pytest.fixture
    def queue_mocks(self):
        with patch("retail_tenancy_core.utils.logger.QueueServiceClient") as service_cls, patch(
            "retail_tenancy_core.utils.logger.QueueClient"
        ) as client_cls:
            service = MagicMock()
            service.list_queues.return_value = []
            service_cls.from_connection_string.return_value = service
            client = MagicMock()
            client_cls.from_connection_string.return_value = client
            yield service, client

    def test_creates_missing_queue(self, queue_mocks):
        service, _ = queue_mocks

        AzureQueueHandler(queue_name="logs-queue", connection_string="UseDevelopmentStorage=true")

        service.create_queue.assert_called_once_with("logs-queue")

    def test_sends_when_batch_is_full(self, queue_mocks):
        _, client = queue_mocks
        handler = AzureQueueHandler(connection_string="UseDevelopmentStorage=true", batch_size=2)

        handler.emit(_record("first", tenant_id=1, record_id=9))
        client.send_message.assert_not_called()

        handler.emit(_record("second"))

        assert client.send_message.call_count == 2
        first = loads(client.send_message.call_args_list[0].args[0])
        assert first["message"] == "first"
        assert first["tenant_id"] == 1
        assert first["context"] == {"record_id": 9}
        assert handler.log_buffer == []

    def test_close_flushes(self, queue_mocks):
        _, client = queue_mocks
        handler = AzureQueueHandler(connection_string="UseDevelopmentStorage=true", batch_size=10)
        handler.emit(_record())

        handler.close()

        client.send_message.assert_called_once()

    def test_without_connection_string_nothing_is_sent(self, queue_mocks, monkeypatch):
        monkeypatch.delenv("AzureWebJobsStorage", raising=False)
        _, client = queue_mocks
        handler = AzureQueueHandler(connection_string="", batch_size=1)

        handler.emit(_record())

        client.send_message.assert_not_called()


class TestConfigureLogging:
    def test_console_only(self):
        logger = configure_logging("pdv", log_level="DEBUG", enable_queue=False)

        underlying = logger.logger
        assert underlying.name == f"{LOGGER_NAME}.pdv"
        assert underlying.level == logging.DEBUG
        assert len(underlying.handlers) == 1
        assert any(isinstance(f, TenantContextFilter) for f in underlying.handlers[0].filters)
        assert get_logger() is logger

    def test_with_queue(self):
        with patch("retail_tenancy_core.utils.logger.AzureQueueHandler") as handler_cls:
            handler_cls.return_value = MagicMock(spec=logging.Handler)
            handler_cls.return_value.level = logging.INFO

            configure_logging(
                "worker", enable_queue=True, connection_string="UseDevelopmentStorage=true"
            )

        handler_cls.assert_called_once()
        assert handler_cls.call_args.kwargs["queue_name"] == "logs-queue"
