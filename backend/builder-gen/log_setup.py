import logging
import sys

_root_configured = False


def setup_logger(name: str, level: str = "INFO") -> logging.Logger:
    """Configure console logging once and return the named logger."""
    global _root_configured

    log_level = getattr(logging, level.upper(), logging.INFO)

    # module loggers (builder_rules, adapters...) inherit the root level
    if not _root_configured:
        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)

        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        root_logger.addHandler(handler)
        _root_configured = True

    logger = logging.getLogger(name)
    logger.setLevel(log_level)
    return logger
