#!/usr/bin/env python3
"""
Test suite for x_unigram.vocab.vocab_logging module.

Tests training-run logging including:
- File and Rich console handler setup
- Console level taken from the trainer config
- Run header with run parameters and hyperparameters
- Fallback logger for library use
"""

import logging
import shutil
import sys
import tempfile
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from x_unigram.schema.trainer_config import UnigramTrainerConfig
from x_unigram.vocab.vocab_logging import get_vocab_logger, log_run_header, setup_vocab_logging


class TestVocabLogging:
    """Test vocabulary logging functionality."""

    def setup_method(self):
        self.tmp_dir = Path(tempfile.mkdtemp())
        self.log_dir = self.tmp_dir / "logs"
        for handler in logging.root.handlers[:]:
            logging.root.removeHandler(handler)

    def teardown_method(self):
        # Close handlers before cleanup to release the log file
        for handler in logging.root.handlers[:]:
            handler.close()
            logging.root.removeHandler(handler)
        for logger_name in ['text2vocab', 'test_logger', 'custom_test', 'fallback_test']:
            logger_obj = logging.getLogger(logger_name)
            for handler in logger_obj.handlers[:]:
                handler.close()
                logger_obj.removeHandler(handler)
            logger_obj.setLevel(logging.NOTSET)
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def read_log(self):
        for handler in logging.root.handlers:
            handler.flush()
        return (self.log_dir / "vocab.log").read_text(encoding='utf-8')

    def test_creates_directory_and_log_file(self):
        logger = setup_vocab_logging(self.log_dir, logger_name='test_logger')

        assert (self.log_dir / "vocab.log").exists()
        assert logger.name == 'test_logger'

    def test_configures_file_and_console_handlers(self):
        setup_vocab_logging(self.log_dir)

        handlers = {type(h).__name__: h for h in logging.root.handlers}
        assert len(logging.root.handlers) == 2
        assert handlers['FileHandler'].level == logging.DEBUG
        assert handlers['RichHandler'].level == logging.INFO

    def test_console_level_from_config(self):
        config = UnigramTrainerConfig(log_level="WARNING")
        setup_vocab_logging(self.log_dir, config)

        console = next(h for h in logging.root.handlers if type(h).__name__ == 'RichHandler')
        assert console.level == logging.WARNING

    def test_header_records_hyperparameters(self):
        config = UnigramTrainerConfig(vocab_size=1234, pruning="score")
        setup_vocab_logging(self.log_dir, config, run_params={"input_dir": "corpus/"})

        content = self.read_log()
        assert "X-UNIGRAM VOCABULARY TRAINING" in content
        assert "input_dir: corpus/" in content
        assert "vocab_size: 1234" in content
        assert "pruning: score" in content
        assert "desired_vocab_size: 1357" in content
        assert f"log_file: {self.log_dir / 'vocab.log'}" in content

    def test_header_without_config(self):
        logger = logging.getLogger('test_logger')
        with patch.object(logger, "info") as info:
            log_run_header(logger)
        messages = [call.args[0] for call in info.call_args_list]
        assert "X-UNIGRAM VOCABULARY TRAINING" in messages
        assert "TRAINER HYPERPARAMETERS:" not in messages

    def test_library_records_reach_file(self):
        setup_vocab_logging(self.log_dir)
        logging.getLogger('x_unigram.vocab.trainer').debug("EM iter=0 size=42")

        assert "EM iter=0 size=42" in self.read_log()

    def test_replaces_existing_handlers(self):
        logging.root.addHandler(logging.StreamHandler())

        setup_vocab_logging(self.log_dir)

        assert len(logging.root.handlers) == 2

    def test_get_vocab_logger_default_name(self):
        assert get_vocab_logger().name == 'text2vocab'

    def test_get_vocab_logger_fallback_handler(self):
        # pytest attaches capture handlers to the root logger during the test
        with patch.object(logging.root, "handlers", []):
            logger = get_vocab_logger('custom_test')

        assert logger.level == logging.WARNING
        assert [type(h).__name__ for h in logger.handlers] == ['RichHandler']

    def test_get_vocab_logger_defers_to_configured_root(self):
        setup_vocab_logging(self.log_dir)

        logger = get_vocab_logger('fallback_test')

        assert logger.handlers == []
        assert logger.level == logging.NOTSET
