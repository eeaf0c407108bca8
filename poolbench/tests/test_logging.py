import logging

from poolbench.logging import LocalQueueHandler, create_logger, has_level_handler, shutdown_logging


def test_create_logger_attaches_queue_handler(tmp_path):
    log_file = tmp_path / "bench.log"
    logger = logging.getLogger("poolbench-test-isolated")
    logger.propagate = False
    try:
        create_logger("poolbench-test-isolated", logging.INFO, str(log_file))

        queue_handlers = [h for h in logger.handlers if isinstance(h, LocalQueueHandler)]
        assert len(queue_handlers) == 1
        assert has_level_handler(logger)

        logger.info("trial 1 running..")
    finally:
        shutdown_logging()

    assert not any(isinstance(h, LocalQueueHandler) for h in logger.handlers)
    assert "trial 1 running.." in log_file.read_text()


def test_create_logger_is_idempotent():
    logger = logging.getLogger("poolbench-test-idempotent")
    logger.propagate = False
    try:
        create_logger("poolbench-test-idempotent")
        create_logger("poolbench-test-idempotent")
        assert len(logger.handlers) == 1
    finally:
        shutdown_logging()


def test_prepare_passes_record_through():
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
    assert LocalQueueHandler(None).prepare(record) is record  # type: ignore[arg-type]
