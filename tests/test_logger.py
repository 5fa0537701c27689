import asyncio
import logging
import signal

import pytest

from relay_trader.utils.logger import ThreadLogger, create_file_handler


def test_records_reach_handlers_through_the_queue(tmp_path):
    log_file = tmp_path / "logs" / "relay.log"
    thread_logger = ThreadLogger(name="relay-trader-logger-test", signal_level="debug")
    handler = create_file_handler(log_file=str(log_file), level="INFO", rotate_when=None)
    thread_logger.add_handler(handler)

    logger = thread_logger.get_logger()
    logger.debug("hidden detail")
    logger.info("lifecycle wired")

    assert thread_logger.shutdown() is True
    handler.close()

    content = log_file.read_text()
    assert "lifecycle wired" in content
    assert "hidden detail" not in content
    assert "[MainThread]" in content


async def test_records_carry_the_producing_task(tmp_path):
    log_file = tmp_path / "relay.log"
    thread_logger = ThreadLogger(name="relay-trader-task-test")
    handler = create_file_handler(log_file=str(log_file), rotate_when=None)
    thread_logger.add_handler(handler)

    async def init_tokens():
        thread_logger.get_logger().info("Loaded 2 tokens")

    await asyncio.get_running_loop().create_task(init_tokens(), name="InitStep-init_tokens")

    thread_logger.shutdown()
    handler.close()
    assert "[MainThread/InitStep-init_tokens]" in log_file.read_text()


def test_verbosity_signals_adjust_every_handler():
    thread_logger = ThreadLogger(name="relay-trader-level-test", signal_level="bogus")
    assert thread_logger.signal_level == logging.INFO

    handler = logging.NullHandler()
    thread_logger.add_handler(handler)

    thread_logger._on_signal(signal.SIGUSR1, None)
    assert handler.level == logging.DEBUG
    # Already at the loudest level
    thread_logger._on_signal(signal.SIGUSR1, None)
    assert handler.level == logging.DEBUG

    thread_logger._on_signal(signal.SIGUSR2, None)
    assert handler.level == logging.INFO

    thread_logger.remove_handler(handler)
    assert thread_logger.shutdown() is False


@pytest.mark.parametrize("steps, expected", [(3, logging.CRITICAL), (10, logging.CRITICAL), (-5, logging.DEBUG)])
def test_adjust_verbosity_is_clamped(steps, expected):
    thread_logger = ThreadLogger(name="relay-trader-clamp-test", signal_level="WARNING")
    handler = logging.NullHandler()
    thread_logger.add_handler(handler)

    thread_logger.adjust_verbosity(steps)

    assert handler.level == expected
    thread_logger.shutdown()
