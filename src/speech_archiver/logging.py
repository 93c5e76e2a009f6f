import logging
import sys

from pythonjsonlogger.json import JsonFormatter


def setup_logging():
    """
    Configures and sets up structured JSON logging for the application.

    This function initializes a JSON formatter that includes timestamp, level,
    logger name, message, trace_id, and span_id. It replaces default handlers
    for the root logger with a single stdout stream handler so recognizer
    callbacks, storage calls and the pipeline share one log format.

    Returns:
        logging.Logger: The configured root logger instance.
    """
    formatter = JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s %(trace_id)s %(span_id)s"
    )
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)
    root_logger.handlers = []
    root_logger.addHandler(stream_handler)

    # The SDKs log every HTTP exchange at INFO.
    for logger_name in ["urllib3", "websockets", "httpx"]:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    return root_logger
