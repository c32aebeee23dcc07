import logging


HANDLER = None

VERBOSITY_LEVELS = {0: "WARNING", 1: "INFO"}


def level_for_verbosity(verbosity: int) -> str:
    """Map the -v count of the CLI onto a logging level name."""
    if verbosity >= 2:
        return "DEBUG"
    return VERBOSITY_LEVELS.get(verbosity, "WARNING")


def setup_logger(logging_level="WARNING"):
    global HANDLER
    logger = logging.getLogger("bsontosqlite")
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    if HANDLER is not None:
        logger.removeHandler(HANDLER)
    HANDLER = logging.StreamHandler()
    HANDLER.setLevel(logging_level)
    HANDLER.setFormatter(formatter)
    logger.setLevel(logging_level)
    logger.addHandler(HANDLER)
    return logger
