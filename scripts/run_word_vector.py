"""
Convert the text columns of a CSV dataset into sparse word vectors.

This script is a convenience wrapper around
`wordvec.pipeline.run_word_vector`, which:

- loads the configured training CSV
- builds the word dictionary (per label value if a label column is set)
- encodes the training data, and optionally a test CSV, with that
  dictionary
- writes each result as a sparse .npz matrix plus attribute metadata

Usage (from project root):

    python -m scripts.run_word_vector --input data/train.csv
    # or, dictionary from train applied to test
    python scripts/run_word_vector.py --input data/train.csv \
        --test-input data/test.csv
"""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from wordvec.pipeline import run_word_vector
from wordvec.utils.filter_utils import get_logger, load_filter_config


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Convert text columns of a CSV file into sparse word vectors."
    )
    parser.add_argument(
        "--config",
        type=str,
        default="config/filter.yaml",
        help="Path to filter config YAML (default: config/filter.yaml).",
    )
    parser.add_argument(
        "--input",
        type=str,
        default=None,
        help="Training CSV (default: dataset.path from the config).",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output .npz for the training vectors (default: <output_dir>/train.npz).",
    )
    parser.add_argument(
        "--test-input",
        type=str,
        default=None,
        help="Optional CSV encoded with the dictionary built from --input.",
    )
    parser.add_argument(
        "--test-output",
        type=str,
        default=None,
        help="Output .npz for the test vectors (default: <output_dir>/test.npz).",
    )
    parser.add_argument(
        "--words-to-keep",
        type=int,
        default=None,
        help="Words to keep, per label value if a label column is set.",
    )
    parser.add_argument(
        "--label-column",
        type=str,
        default=None,
        help="Label column used to stratify word counts.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)

    cfg = load_filter_config(args.config)
    # Handlers live on the package logger; wordvec.* modules propagate to it.
    get_logger(name="wordvec", config=cfg, log_file_suffix="word_vector")
    logger = logging.getLogger("wordvec.run_word_vector")

    logger.info("=" * 80)
    logger.info("Starting word vector conversion.")
    logger.info("Config: %s, input: %s, test input: %s", args.config, args.input, args.test_input)

    summary = run_word_vector(
        config_path=args.config,
        input_path=args.input,
        output_path=args.output,
        test_input_path=args.test_input,
        test_output_path=args.test_output,
        words_to_keep=args.words_to_keep,
        label_column=args.label_column,
    )

    logger.info(
        "Dictionary: %d words, output width: %d",
        summary["dictionary_size"],
        summary["output_width"],
    )
    logger.info("Word vector conversion completed.")


if __name__ == "__main__":
    main()
