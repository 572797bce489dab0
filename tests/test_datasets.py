"""
Tests for configuration and dataset loading.

These tests validate that:

- the filter configuration loads and requires its core sections
- column types are inferred from dtypes or taken from explicit lists
- DataFrame rows become records with missing values, category indices
  and weights
- a training schema can be reused to convert test data
- loggers and output directories are set up from the configuration
"""

from __future__ import annotations

import logging
import math
import os

import numpy as np
import pandas as pd
import pytest
import yaml

from wordvec.data.datasets import (
    dataframe_to_dataset,
    dataframe_to_records,
    infer_schema,
    load_dataset,
)
from wordvec.data.schema import AttributeType
from wordvec.utils.filter_utils import (
    ensure_dir_exists,
    get_logger,
    get_words_to_keep,
    load_filter_config,
)


REPO_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "..", "config", "filter.yaml")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _frame() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "message": ["Win money now", None, "see you at lunch"],
            "length": [13, 0, 16],
            "label": ["spam", "ham", "ham"],
        }
    )


def _write_config(tmp_path, csv_path, **dataset_overrides) -> str:
    dataset = {
        "path": str(csv_path),
        "text_columns": ["message"],
        "label_column": "label",
    }
    dataset.update(dataset_overrides)
    cfg = {
        "dataset": dataset,
        "filter": {"words_to_keep": 5},
        "paths": {"output_dir": str(tmp_path / "out")},
    }
    path = tmp_path / "filter.yaml"
    path.write_text(yaml.safe_dump(cfg), encoding="utf-8")
    return str(path)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


def test_repository_config_has_required_sections():
    cfg = load_filter_config(REPO_CONFIG_PATH)
    assert "dataset" in cfg
    assert "filter" in cfg
    assert get_words_to_keep(cfg) == 1000


def test_missing_config_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_filter_config(str(tmp_path / "nope.yaml"))


def test_empty_config_file_raises(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    with pytest.raises(ValueError):
        load_filter_config(str(path))


def test_config_without_filter_section_raises(tmp_path):
    path = tmp_path / "partial.yaml"
    path.write_text(yaml.safe_dump({"dataset": {}}), encoding="utf-8")
    with pytest.raises(KeyError):
        load_filter_config(str(path))


# ---------------------------------------------------------------------------
# Schema inference and row conversion
# ---------------------------------------------------------------------------


def test_infer_schema_from_dtypes():
    schema = infer_schema(_frame(), label_column="label")
    assert [a.type for a in schema] == [
        AttributeType.TEXT,
        AttributeType.NUMERIC,
        AttributeType.CATEGORICAL,
    ]
    assert schema.label_index == 2
    assert schema.label_attribute.values == ("ham", "spam")


def test_explicit_text_columns_make_other_strings_categorical():
    df = _frame().assign(channel=["sms", "email", "sms"])
    schema = infer_schema(df, text_columns=["message"])
    assert schema.attribute(3).type == AttributeType.CATEGORICAL
    assert schema.attribute(3).values == ("email", "sms")
    assert schema.label_index is None


def test_unknown_column_raises():
    with pytest.raises(KeyError):
        infer_schema(_frame(), text_columns=["body"])


def test_label_cannot_be_text():
    with pytest.raises(ValueError):
        infer_schema(_frame(), text_columns=["message"], label_column="message")


def test_dataframe_to_dataset_converts_values():
    df = _frame().assign(w=[1.0, 2.0, 0.5])
    schema, records = dataframe_to_dataset(
        df, text_columns=["message"], label_column="label", weight_column="w"
    )

    assert schema.attribute_names() == ["message", "length", "label"]
    assert records[0].values == ("Win money now", 13.0, 1.0)
    assert records[1].is_missing(0)
    assert records[1].values[2] == 0.0
    assert [r.weight for r in records] == [1.0, 2.0, 0.5]


def test_training_schema_converts_test_frame():
    schema = infer_schema(_frame(), text_columns=["message"], label_column="label")
    test = pd.DataFrame({"label": ["spam"], "length": [np.nan], "message": ["hello"]})

    (record,) = dataframe_to_records(test, schema)
    assert record.values[0] == "hello"
    assert record.values[1] is None
    assert record.values[2] == 1.0

    with pytest.raises(ValueError):
        dataframe_to_records(test.assign(label=["eggs"]), schema)
    with pytest.raises(KeyError):
        dataframe_to_records(test.drop(columns=["length"]), schema)


# ---------------------------------------------------------------------------
# CSV loading
# ---------------------------------------------------------------------------


def test_load_dataset_from_config(tmp_path):
    csv_path = tmp_path / "messages.csv"
    _frame().to_csv(csv_path, index=False)
    config_path = _write_config(tmp_path, csv_path)

    schema, records = load_dataset(config_path=config_path)

    assert schema.name == "messages"
    assert schema.label_index == 2
    assert len(records) == 3
    assert records[1].is_missing(0)
    assert not math.isnan(records[2].values[1])


def test_load_dataset_missing_csv_raises(tmp_path):
    config_path = _write_config(tmp_path, tmp_path / "missing.csv")
    with pytest.raises(FileNotFoundError):
        load_dataset(config_path=config_path)


# ---------------------------------------------------------------------------
# Logging and filesystem helpers
# ---------------------------------------------------------------------------


def test_ensure_dir_exists_creates_nested_dirs(tmp_path):
    target = tmp_path / "a" / "b"
    ensure_dir_exists(str(target))
    ensure_dir_exists(str(target))
    assert target.is_dir()


def test_get_logger_writes_to_file_when_configured(tmp_path):
    cfg = {
        "logging": {"level": "DEBUG", "to_file": True, "file_prefix": "wv"},
        "paths": {"logs_dir": str(tmp_path / "logs")},
    }
    logger = get_logger("wordvec.tests.file_logger", config=cfg, log_file_suffix="run")
    try:
        assert logger.level == logging.DEBUG
        logger.debug("hello file")
        for handler in logger.handlers:
            handler.flush()
        log_path = tmp_path / "logs" / "wv_run.log"
        assert "hello file" in log_path.read_text(encoding="utf-8")
        # A second call reuses the configured logger.
        assert get_logger("wordvec.tests.file_logger") is logger
        assert len(logger.handlers) == 2
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
