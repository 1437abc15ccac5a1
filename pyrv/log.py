import logging


def getLogger():
    logger = logging.getLogger('pyrv')
    logger.setLevel(logging.INFO)

    # The application decides where records go; see setup_file_log().
    logger.addHandler(logging.NullHandler())

    return logger


def setup_file_log(filename: str = "run.log", level=logging.INFO):
    """Attaches a file handler to the package logger.

    Args:
        filename: Path of the log file. Overwritten on each call.
        level: Logging level for the package logger.

    Returns:
        The new handler, so callers can remove it again.
    """
    formatter = logging.Formatter('%(name)15s: %(message)s')
    file_handler = logging.FileHandler(filename, 'w')
    file_handler.setFormatter(formatter)

    logger.setLevel(level)
    logger.addHandler(file_handler)

    return file_handler


logger = getLogger()
