from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from x_unigram.schema.trainer_config import UnigramTrainerConfig
from x_unigram.vocab.errors import ConfigurationError

c = Console()

DEFAULT_CONFIG = Path(__file__).resolve().parents[1] / "config" / "pipelines" / "text2vocab.yaml"


def load_trainer_config(path: Optional[Path] = None, quiet: bool = False) -> UnigramTrainerConfig:
	"""
	Load trainer hyperparameters from YAML and render a summary table.

	Args:
		path: YAML file to load (defaults to config/pipelines/text2vocab.yaml)
		quiet: If True, suppresses printing the config table.

	Raises:
		FileNotFoundError: If the file does not exist
		ConfigurationError: If the YAML is malformed or a value is invalid
	"""
	p = Path(path) if path is not None else DEFAULT_CONFIG

	if not quiet:
		c.rule("[bold cyan]Loading Unigram Trainer Config")

	if not p.exists():
		c.print(f"[red]❌ Missing config file:[/] {p}")
		raise FileNotFoundError(f"Missing trainer config: {p}")

	try:
		with p.open("r", encoding="utf-8") as f:
			raw = yaml.safe_load(f) or {}
	except yaml.YAMLError as e:
		raise ConfigurationError(f"Malformed YAML in {p}: {e}") from e

	if not isinstance(raw, dict):
		raise ConfigurationError(f"Expected a mapping at the top of {p}, got {type(raw).__name__}")

	try:
		cfg = UnigramTrainerConfig(**raw)
	except ValidationError as e:
		raise ConfigurationError(f"Invalid trainer configuration in {p}: {e}") from e

	if not quiet:
		c.print(f"[green]✔ Successfully parsed:[/] [white]{p.name}[/white]")

		tbl = Table(show_header=True, header_style="bold magenta")
		tbl.add_column("Field", style="dim")
		tbl.add_column("Value")
		for field, value in cfg.model_dump().items():
			tbl.add_row(field, str(value))
		c.print(tbl)

	return cfg
