"""
End-to-end word vector filtering of CSV files.

This module:
- loads the training CSV described by config/filter.yaml
- builds the word dictionary from it with StringToWordVector
- optionally encodes a second (test) CSV with the same dictionary
- writes every encoded dataset as a scipy sparse .npz matrix, alongside
  a JSON file describing the output attributes and record weights

It is callable as a library function and wrapped by
scripts/run_word_vector.py.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, List, Optional

from scipy.sparse import save_npz

from wordvec.data.datasets import load_dataset
from wordvec.data.schema import Schema
from wordvec.features.dictionary import check_words_to_keep, save_dictionary
from wordvec.features.encoder import SparseVector
from wordvec.features.transformer import vector_weights, vectors_to_csr
from wordvec.filters.base import batch_filter, use_filter
from wordvec.filters.word_vector import StringToWordVector
from wordvec.utils.filter_utils import (
    DEFAULT_FILTER_CONFIG_PATH,
    ensure_dir_exists,
    get_words_to_keep,
    load_filter_config,
)


logger = logging.getLogger(__name__)


def _npz_path(output_path: str) -> str:
    # save_npz appends the suffix itself when it is absent.
    if output_path.endswith(".npz"):
        return output_path
    return f"{output_path}.npz"


def _metadata_path(output_path: str) -> str:
    stem, _ = os.path.splitext(output_path)
    return f"{stem}_attributes.json"


def write_vectors(
    vectors: List[SparseVector],
    output_schema: Schema,
    output_path: str,
) -> str:
    """
    Write encoded vectors as a sparse .npz matrix plus attribute metadata.

    Parameters
    ----------
    vectors : List[SparseVector]
        Encoded records.
    output_schema : Schema
        Output schema of the filter; gives the matrix width and the
        attribute names.
    output_path : str
        Destination of the .npz file; ".npz" is appended when missing.

    Returns
    -------
    str
        Path of the metadata JSON file.
    """
    output_path = _npz_path(output_path)
    ensure_dir_exists(os.path.dirname(output_path))
    matrix = vectors_to_csr(vectors, width=output_schema.num_attributes)
    save_npz(output_path, matrix)

    metadata = {
        "relation": output_schema.name,
        "attributes": [
            {"name": att.name, "type": att.type.value, "values": list(att.values)}
            for att in output_schema
        ],
        "label_index": output_schema.label_index,
        "weights": vector_weights(vectors).tolist(),
    }
    meta_path = _metadata_path(output_path)
    with open(meta_path, "w", encoding="utf-8") as f:
        json.dump(metadata, f, ensure_ascii=False, indent=2)
    return meta_path


def run_word_vector(
    config_path: str = DEFAULT_FILTER_CONFIG_PATH,
    input_path: Optional[str] = None,
    output_path: Optional[str] = None,
    test_input_path: Optional[str] = None,
    test_output_path: Optional[str] = None,
    words_to_keep: Optional[int] = None,
    label_column: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build a dictionary from the training CSV and encode the data.

    Parameters
    ----------
    config_path : str
        Path to the filter YAML configuration.
    input_path : Optional[str]
        Training CSV. Defaults to ``dataset.path``.
    output_path : Optional[str]
        Destination .npz for the encoded training data. Defaults to
        ``<paths.output_dir>/train.npz``.
    test_input_path : Optional[str]
        Optional second CSV encoded with the training dictionary.
    test_output_path : Optional[str]
        Destination .npz for the encoded test data. Defaults to
        ``<paths.output_dir>/test.npz``.
    words_to_keep : Optional[int]
        Overrides ``filter.words_to_keep``.
    label_column : Optional[str]
        Overrides ``dataset.label_column``.

    Returns
    -------
    Dict[str, Any]
        Summary with the dictionary size, output width, record counts and
        the paths written.
    """
    cfg = load_filter_config(config_path)
    paths_cfg = cfg.get("paths", {}) or {}
    output_dir = paths_cfg.get("output_dir", "outputs")

    if words_to_keep is None:
        words_to_keep = get_words_to_keep(cfg)
    check_words_to_keep(words_to_keep)
    output_path = _npz_path(output_path or os.path.join(output_dir, "train.npz"))

    schema, train_records = load_dataset(
        input_path, config_path=config_path, label_column=label_column
    )
    logger.info(
        "Loaded %d training records with %d attributes (%d text)",
        len(train_records),
        schema.num_attributes,
        len(schema.text_indices()),
    )

    word_filter = StringToWordVector(words_to_keep=words_to_keep)
    test_vectors: Optional[List[SparseVector]] = None

    if test_input_path is not None:
        _, test_records = load_dataset(test_input_path, config_path=config_path, schema=schema)
        logger.info("Loaded %d test records", len(test_records))
        output_schema, train_vectors, test_vectors = batch_filter(
            word_filter, schema, train_records, test_records
        )
    else:
        output_schema, train_vectors = use_filter(word_filter, schema, train_records)

    summary: Dict[str, Any] = {
        "dictionary_size": len(word_filter.dictionary),
        "output_width": output_schema.num_attributes,
        "num_train": len(train_vectors),
        "train_output": output_path,
    }

    write_vectors(train_vectors, output_schema, output_path)
    logger.info("Wrote %d training vectors to %s", len(train_vectors), output_path)

    if test_vectors is not None:
        test_output_path = _npz_path(test_output_path or os.path.join(output_dir, "test.npz"))
        write_vectors(test_vectors, output_schema, test_output_path)
        logger.info("Wrote %d test vectors to %s", len(test_vectors), test_output_path)
        summary["num_test"] = len(test_vectors)
        summary["test_output"] = test_output_path

    if paths_cfg.get("artifacts_dir"):
        summary["dictionary_path"] = save_dictionary(
            word_filter.dictionary, paths_cfg["artifacts_dir"]
        )

    return summary
