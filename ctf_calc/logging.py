import logging
from contextlib import contextmanager
from logging import Handler, StreamHandler, FileHandler, Logger
from pathlib import Path
from typing import Iterator


class ModuleLogger:
    """Creates the loggers of the modules in `ctf_calc`. All handlers share
    the same record format.
    """
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

    # Constructions are solved in worker threads: each record shows the
    # thread it was logged from.
    FORMATTER = logging.Formatter(
        '[%(threadName)s | %(name)s | %(levelname)s] %(message)s'
    )

    @classmethod
    def _setup(cls, handler: Handler, log_level: int | None) -> Handler:
        handler.setFormatter(cls.FORMATTER)
        handler.setLevel(log_level or cls.DEBUG)
        return handler

    @classmethod
    def create_console_handler(cls, log_level: int | None = None) -> StreamHandler:
        return cls._setup(logging.StreamHandler(), log_level)

    @classmethod
    def create_file_handler(cls, file_path: Path | str, log_level: int | None = None) -> FileHandler:
        # records are appended; an existing log file is never truncated
        handler = logging.FileHandler(file_path, mode='a', encoding='utf-8')
        return cls._setup(handler, log_level)

    @classmethod
    def get_logger(
        cls,
        logger_name: str,
        file_path: Path | str | None = None,
        log_level: int = logging.WARNING
    ) -> Logger:
        """Returns the logger with name `logger_name`.

        The first call for a given name configures the logger: a console
        handler, plus a file handler if `file_path` is given, both at
        `log_level`. Later calls return the same logger unchanged.
        """
        logger = logging.getLogger(logger_name)
        if logger.handlers:
            return logger
        logger.addHandler(cls.create_console_handler(log_level))
        if file_path is not None:
            logger.addHandler(cls.create_file_handler(file_path, log_level))
        logger.setLevel(log_level)
        return logger

    @classmethod
    @contextmanager
    def logging_to_file(
        cls,
        logger: Logger,
        file_path: Path | str,
        log_level: int | None = None
    ) -> Iterator[FileHandler]:
        """Context manager that also sends the records of `logger` to the
        file at `file_path` while the context is active, e.g. to keep the
        severe messages of a CTF calculation next to its report.
        """
        handler = cls.create_file_handler(file_path, log_level)
        logger.addHandler(handler)
        try:
            yield handler
        finally:
            logger.removeHandler(handler)
            handler.close()
