#!/usr/bin/env python3
"""
text2vocab.py

Recursively load all .txt and .jsonl files under --in, count whitespace
separated words, train a Unigram-LM vocabulary and emit vocab.jsonl plus
vocab_stats.json under --out.
"""
import argparse
import json
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterator, List

from x_unigram.config_loader import DEFAULT_CONFIG, load_trainer_config
from x_unigram.schema.vocab import VocabPiece, VocabStats
from x_unigram.vocab import (
    UnigramModel,
    UnigramTrainer,
    validate_vocabulary_completeness,
    validate_vocabulary_structure
)
from x_unigram.vocab.vocab_logging import setup_vocab_logging, get_vocab_logger

# Module-level logger that gets configured in main()
logger = None


def get_logger() -> logging.Logger:
    """Get the module logger, creating a basic one if none exists."""
    global logger
    if logger is None:
        logger = get_vocab_logger('text2vocab')
    return logger


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        prog="text2vocab",
        description="Train a Unigram-LM vocabulary from a directory of text"
    )
    p.add_argument(
        "-i", "--in",
        dest="indir", type=Path, required=True,
        help="Input directory; recursively search for *.txt and *.jsonl"
    )
    p.add_argument(
        "-o", "--out",
        dest="outdir", type=Path, required=True,
        help="Output directory for vocab.jsonl, vocab_stats.json and vocab.log"
    )
    p.add_argument(
        "-c", "--config",
        dest="config", type=Path,
        default=None,
        help="Path to YAML hyperparams (default: the packaged config/pipelines/text2vocab.yaml)"
    )
    p.add_argument(
        "--vocab-size",
        dest="vocab_size", type=int, default=None,
        help="Override vocab_size from the config"
    )
    return p.parse_args(argv)


def find_corpus_files(indir: Path) -> List[Path]:
    """Find all .txt and .jsonl files recursively in the input directory."""
    logger = get_logger()
    logger.info(f"Searching for corpus files in: {indir}")

    if not indir.exists():
        logger.error(f"Input directory does not exist: {indir}")
        raise FileNotFoundError(f"Input directory not found: {indir}")

    files = sorted(list(indir.rglob("*.txt")) + list(indir.rglob("*.jsonl")))
    if not files:
        logger.error(f"No corpus files found under: {indir}")
        raise SystemExit(1)

    logger.info(f"Found {len(files)} corpus files")
    for i, f in enumerate(files, 1):
        logger.debug(f"  {i:3d}. {f}")
    return files


def iter_texts(files: List[Path]) -> Iterator[str]:
    """Yield text lines (.txt) or the "raw" field of each record (.jsonl)."""
    logger = get_logger()
    for f in files:
        with open(f, "r", encoding="utf-8") as fh:
            for line_no, line in enumerate(fh, 1):
                line = line.rstrip("\n")
                if not line.strip():
                    continue
                if f.suffix == ".jsonl":
                    try:
                        record = json.loads(line)
                    except json.JSONDecodeError as e:
                        logger.warning(f"{f}:{line_no}: skipping invalid JSON ({e})")
                        continue
                    raw = record.get("raw") if isinstance(record, dict) else None
                    if not isinstance(raw, str):
                        logger.warning(f"{f}:{line_no}: record has no string 'raw' field")
                        continue
                    yield raw
                else:
                    yield line


def whitespace_pretokenize(text: str) -> List[str]:
    return text.split()


def save_vocab(path: Path, model: UnigramModel, stats: VocabStats) -> None:
    """Save the final vocabulary in id order, one VocabPiece per line, plus statistics."""
    logger = get_logger()
    logger.info(f"Saving final vocabulary to: {path}")
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        for piece, score in model:
            rec = VocabPiece(piece=piece, score=score)
            f.write(rec.model_dump_json() + "\n")

    stats_path = path.parent / "vocab_stats.json"
    with open(stats_path, "w", encoding="utf-8") as f:
        f.write(stats.model_dump_json(indent=2))

    logger.info("-" * 50)
    logger.info("FINAL VOCABULARY STATISTICS:")
    logger.info(f"  Total pieces: {stats.total_pieces}")
    logger.info(f"  Seed pieces: {stats.seed_pieces}")
    logger.info(f"  Required chars: {stats.required_chars}")
    logger.info(f"  EM iterations: {stats.em_iterations}")
    logger.info(f"  Pruning rounds: {stats.pruning_rounds}")
    logger.info(f"  Final objective: {stats.final_objective:.6f}")
    logger.info("-" * 50)


def run(indir: Path, outdir: Path, trainer: UnigramTrainer) -> UnigramModel:
    """Count words, train and write the outputs. Returns the trained model."""
    logger = get_logger()
    files = find_corpus_files(indir)

    trainer.feed(iter_texts(files), whitespace_pretokenize)
    logger.info(f"Counted {len(trainer.words):,} distinct words")

    model, special_tokens = trainer.train_from_feed()

    validate_vocabulary_completeness(trainer.required_chars(trainer.words), model)
    structure = validate_vocabulary_structure(model)
    logger.info(f"Vocabulary structure: {structure}")
    if special_tokens:
        logger.info(f"Pass-through special tokens: {special_tokens}")

    save_vocab(outdir / "vocab.jsonl", model, trainer.stats)
    return model


def main(argv=None):
    args = parse_args(argv)

    cfg = load_trainer_config(args.config, quiet=True)
    overrides: Dict[str, int] = {}
    if args.vocab_size is not None:
        overrides["vocab_size"] = args.vocab_size
    trainer = UnigramTrainer(cfg, **overrides)

    global logger
    logger = setup_vocab_logging(
        args.outdir,
        trainer.config,
        'text2vocab',
        run_params={
            "input_dir": args.indir,
            "output_dir": args.outdir,
            "config_file": args.config or DEFAULT_CONFIG,
            "overrides": overrides or "none",
        },
    )

    start = time.time()
    model = run(args.indir, args.outdir, trainer)
    elapsed = time.time() - start

    logger.info("=" * 80)
    logger.info(f"Completed at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    logger.info(f"Total execution time: {elapsed:.2f} seconds")
    logger.info(f"[bold green]✅ Vocabulary training complete! → {args.outdir / 'vocab.jsonl'}[/bold green]")
    logger.info(f"[dim]Final vocabulary size: {len(model)} pieces[/dim]")


if __name__ == "__main__":
    main()
