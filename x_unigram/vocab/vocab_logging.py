#!/usr/bin/env python3
"""
vocab_logging.py

Logging for Unigram-LM training runs. A run writes everything to
`<out_dir>/vocab.log` and echoes records at the configured level to a Rich
console. The log opens with a header recording the run parameters and the
effective trainer hyperparameters, so a vocabulary can always be traced back
to the settings that produced it.
"""
import logging
from datetime import datetime
from pathlib import Path
from typing import Mapping, Optional

from rich.console import Console
from rich.logging import RichHandler

from x_unigram.schema.trainer_config import UnigramTrainerConfig

LOG_FILE_NAME = "vocab.log"
RULE_WIDTH = 80

_FILE_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)-28s | %(message)s'
_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _reset_root_handlers() -> None:
    for handler in logging.root.handlers[:]:
        handler.close()
        logging.root.removeHandler(handler)


def log_run_header(
    logger: logging.Logger,
    config: Optional[UnigramTrainerConfig] = None,
    run_params: Optional[Mapping[str, object]] = None,
) -> None:
    """Write the run banner, the run parameters and the trainer hyperparameters."""
    logger.info("=" * RULE_WIDTH)
    logger.info("X-UNIGRAM VOCABULARY TRAINING")
    logger.info("=" * RULE_WIDTH)
    logger.info(f"Run started at: {datetime.now().strftime(_DATE_FORMAT)}")

    if run_params:
        logger.info("RUN PARAMETERS:")
        for key, value in run_params.items():
            logger.info(f"  {key}: {value}")

    if config is not None:
        logger.info("TRAINER HYPERPARAMETERS:")
        for field, value in config.model_dump().items():
            logger.info(f"  {field}: {value}")
        logger.info(f"  desired_vocab_size: {(config.vocab_size * 11) // 10}")

    logger.info("-" * RULE_WIDTH)


def setup_vocab_logging(
    out_dir: Path,
    config: Optional[UnigramTrainerConfig] = None,
    logger_name: str = 'text2vocab',
    run_params: Optional[Mapping[str, object]] = None,
) -> logging.Logger:
    """
    Route a training run's logging to `out_dir/vocab.log` and the console.

    The file handler records DEBUG and above. The Rich console handler
    uses `config.log_level` (INFO without a config). Existing root handlers
    are closed and replaced, so repeated runs in one process do not
    duplicate output.

    Args:
        out_dir: Output directory; created if missing
        config: Effective trainer hyperparameters, written to the header
        logger_name: Name of the pipeline logger to return
        run_params: Extra key/value pairs for the header (paths, overrides)

    Returns:
        The pipeline logger
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    _reset_root_handlers()

    log_file = out_dir / LOG_FILE_NAME
    file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT))

    console_level = config.log_level if config is not None else "INFO"
    console_handler = RichHandler(console=Console(), show_path=False, rich_tracebacks=True, markup=True)
    console_handler.setLevel(console_level)

    logging.root.setLevel(logging.DEBUG)
    logging.root.addHandler(file_handler)
    logging.root.addHandler(console_handler)

    logger = logging.getLogger(logger_name)
    logger.setLevel(logging.DEBUG)
    logger.propagate = True

    params = {"log_file": log_file}
    params.update(run_params or {})
    log_run_header(logger, config, params)
    return logger


def get_vocab_logger(logger_name: str = 'text2vocab') -> logging.Logger:
    """
    Logger for library use outside a configured run.

    When nothing upstream handles records, a WARNING-level Rich handler is
    attached so problems still reach the console.
    """
    logger = logging.getLogger(logger_name)
    if not logger.hasHandlers():
        handler = RichHandler(console=Console(), show_path=False)
        handler.setLevel(logging.WARNING)
        logger.addHandler(handler)
        logger.setLevel(logging.WARNING)
    return logger
