"""
Tests for loading trainer hyperparameters from YAML.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from x_unigram.config_loader import DEFAULT_CONFIG, load_trainer_config
from x_unigram.schema.trainer_config import UnigramTrainerConfig
from x_unigram.vocab.errors import ConfigurationError, ErrorKind


class TestLoadTrainerConfig:
    """Test YAML config loading."""

    def test_default_config(self):
        assert DEFAULT_CONFIG.exists()
        cfg = load_trainer_config(quiet=True)
        assert isinstance(cfg, UnigramTrainerConfig)
        assert cfg.vocab_size == 8000
        assert cfg.pruning == "leave_one_out"

    def test_partial_config_uses_defaults(self, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text("vocab_size: 500\nshow_progress: false\n", encoding="utf-8")

        cfg = load_trainer_config(path, quiet=True)

        assert cfg.vocab_size == 500
        assert cfg.show_progress is False
        assert cfg.n_sub_iterations == 2

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_trainer_config(path, quiet=True) == UnigramTrainerConfig()

    def test_prints_table(self, tmp_path, capsys):
        path = tmp_path / "cfg.yaml"
        path.write_text("vocab_size: 123\n", encoding="utf-8")

        load_trainer_config(path)

        out = capsys.readouterr().out
        assert "vocab_size" in out
        assert "123" in out

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_trainer_config(tmp_path / "nope.yaml", quiet=True)

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("vocab_size: [1, 2\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Malformed YAML"):
            load_trainer_config(path, quiet=True)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_trainer_config(path, quiet=True)

    @pytest.mark.parametrize("line", [
        "vocab_size: 0",
        "vocab_size: 4294967296",
        "shrinking_factor: 1.5",
        "pruning: random",
        "unknown_field: 1",
    ])
    def test_invalid_values(self, tmp_path, line):
        path = tmp_path / "invalid.yaml"
        path.write_text(line + "\n", encoding="utf-8")
        with pytest.raises(ConfigurationError) as exc_info:
            load_trainer_config(path, quiet=True)
        assert exc_info.value.kind == ErrorKind.CONFIGURATION
