import pytest
from loguru import logger


@pytest.fixture
def log_messages():
    """Collect the messages loguru emits while the test runs."""
    messages = []
    handler_id = logger.add(
        lambda message: messages.append(message.record["message"]), level="DEBUG"
    )
    yield messages
    logger.remove(handler_id)
