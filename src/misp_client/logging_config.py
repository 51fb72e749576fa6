# MISP Client - Logging Setup
#
# structlog configuration used by the command line front end. The
# library itself only emits DEBUG records through stdlib loggers;
# this wires them to a console or JSON renderer.

import logging
import sys

import structlog


def configure_logging(verbose: bool = False, json_output: bool = False) -> None:
    """Route stdlib and structlog output to stderr.

    Args:
        verbose: Emit DEBUG records (one line per HTTP exchange).
        json_output: Render records as JSON instead of console text.
    """
    level = logging.DEBUG if verbose else logging.WARNING

    shared_processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    ))

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(level)
    # httpx logs every request at INFO; keep it quiet unless verbose
    logging.getLogger("httpx").setLevel(level)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
