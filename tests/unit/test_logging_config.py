import asyncio
import json
import logging
import sys

import pytest

from core.logging_config import ColoredFormatter, LogContext, StructuredFormatter, get_logger, setup_logging


def _record(msg: str = "Stored image", **attributes) -> logging.LogRecord:
    record = logging.LogRecord(
        name="services.image_storage_service",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in attributes.items():
        setattr(record, key, value)
    return record


@pytest.mark.unit
class TestStructuredFormatter:

    def test_format(self):
        output = json.loads(StructuredFormatter().format(_record()))

        assert output["level"] == "INFO"
        assert output["logger"] == "services.image_storage_service"
        assert output["message"] == "Stored image"
        assert "timestamp" in output

    def test_extra_fields_and_request_context(self):
        record = _record(extra_fields={"path": "images/1/a.png", "uri": "/images/1/a.png"}, request_id="abc")

        output = json.loads(StructuredFormatter().format(record))

        assert output["uri"] == "/images/1/a.png"
        assert output["path"] == "images/1/a.png"
        assert output["request_id"] == "abc"

    def test_exception(self):
        try:
            raise ValueError("broken")
        except ValueError:
            record = logging.LogRecord("test", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

        output = json.loads(StructuredFormatter().format(record))

        assert output["exception"]["type"] == "ValueError"
        assert output["exception"]["message"] == "broken"


@pytest.mark.unit
class TestLogging:

    def test_context_helpers(self, caplog):
        logger = get_logger("tests.logging")

        with caplog.at_level(logging.INFO, logger="tests.logging"):
            logger.info_ctx("Created content", content_id="123")

        assert caplog.records[-1].extra_fields == {"content_id": "123"}
        assert caplog.records[-1].getMessage() == "Created content"

    def test_log_context(self, caplog):
        logger = get_logger("tests.logging")

        with caplog.at_level(logging.INFO, logger="tests.logging"):
            with LogContext(request_id="req-1"):
                logger.info("inside")
            logger.info("outside")

        inside, outside = caplog.records[-2:]
        assert inside.request_id == "req-1"
        assert not hasattr(outside, "request_id")

    def test_colored_formatter(self):
        output = ColoredFormatter(fmt="%(levelname)s %(message)s").format(_record("hello"))

        assert "INFO" in output
        assert output.endswith("hello")

    def test_setup_logging(self):
        root_logger = setup_logging(log_level="DEBUG", json_logs=True)

        try:
            assert root_logger.level == logging.DEBUG
            assert len(root_logger.handlers) == 1
            assert isinstance(root_logger.handlers[0].formatter, StructuredFormatter)
        finally:
            setup_logging(log_level="WARNING", json_logs=False)

    def test_colored_formatter_appends_extra_fields(self):
        record = _record("Stored image", extra_fields={"path": "images/a.png"})

        output = ColoredFormatter(fmt="%(levelname)s %(message)s").format(record)

        assert output.endswith("Stored image path=images/a.png")
        assert record.levelname == "INFO"

    def test_nested_log_context(self, caplog):
        logger = get_logger("tests.logging")

        with caplog.at_level(logging.INFO, logger="tests.logging"):
            with LogContext(request_id="req-1"):
                with LogContext(content_id="c-1"):
                    logger.info("nested")

        record = caplog.records[-1]
        assert record.request_id == "req-1"
        assert record.content_id == "c-1"

    def test_log_context_is_kept_per_task(self, caplog):
        logger = get_logger("tests.logging")

        async def handle(request_id: str, entered: asyncio.Event, proceed: asyncio.Event):
            with LogContext(request_id=request_id):
                entered.set()
                await proceed.wait()
                logger.info(f"handled {request_id}")

        async def handle_concurrently():
            entered = [asyncio.Event(), asyncio.Event()]
            proceed = asyncio.Event()
            tasks = [
                asyncio.create_task(handle("req-1", entered[0], proceed)),
                asyncio.create_task(handle("req-2", entered[1], proceed)),
            ]
            for event in entered:
                await event.wait()
            proceed.set()
            await asyncio.gather(*tasks)

        with caplog.at_level(logging.INFO, logger="tests.logging"):
            asyncio.run(handle_concurrently())

        handled = {record.getMessage(): record.request_id for record in caplog.records[-2:]}
        assert handled == {"handled req-1": "req-1", "handled req-2": "req-2"}
