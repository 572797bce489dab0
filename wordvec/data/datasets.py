"""
Dataset loading utilities.

This module is responsible for:
- reading the dataset section of config/filter.yaml
- loading a CSV file into a pandas DataFrame
- deciding the type of every column (text, categorical, numeric)
- converting DataFrame rows into Record objects that conform to a Schema

The resulting (Schema, records) pair is what the batch filters consume.
A Schema built from the training data can be reused to convert a test
DataFrame, so both share the same category labels.
"""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from wordvec.data.schema import Attribute, AttributeType, Record, Schema
from wordvec.utils.filter_utils import DEFAULT_FILTER_CONFIG_PATH, load_filter_config


# ---------------------------------------------------------------------------
# Schema inference
# ---------------------------------------------------------------------------


def _is_text_dtype(series: pd.Series) -> bool:
    return pd.api.types.is_object_dtype(series) or pd.api.types.is_string_dtype(series)


def _category_labels(series: pd.Series) -> Tuple[str, ...]:
    labels = {str(v) for v in series.dropna().unique()}
    return tuple(sorted(labels))


def infer_schema(
    df: pd.DataFrame,
    text_columns: Optional[Sequence[str]] = None,
    label_column: Optional[str] = None,
    categorical_columns: Optional[Sequence[str]] = None,
    weight_column: Optional[str] = None,
    name: str = "dataset",
) -> Schema:
    """
    Build a Schema describing the columns of a DataFrame.

    Column types are decided as follows:
    - columns listed in ``text_columns`` are TEXT
    - columns listed in ``categorical_columns`` and the label column are
      CATEGORICAL, with their distinct values sorted as category labels
    - remaining non-numeric columns are TEXT when ``text_columns`` is None,
      otherwise CATEGORICAL
    - everything else is NUMERIC

    Parameters
    ----------
    df : pd.DataFrame
        Input data.
    text_columns : Optional[Sequence[str]]
        Columns holding free text. If None, they are inferred from dtypes.
    label_column : Optional[str]
        Column designated as the label (class) attribute.
    categorical_columns : Optional[Sequence[str]]
        Columns holding category labels.
    weight_column : Optional[str]
        Column holding record weights; it is not part of the schema.
    name : str
        Name given to the schema.

    Returns
    -------
    Schema
        Schema with one attribute per column (minus the weight column).

    Raises
    ------
    KeyError
        If a named column does not exist in the DataFrame.
    ValueError
        If the label column is also listed as a text column.
    """
    named = list(text_columns or []) + list(categorical_columns or [])
    for col in named + [c for c in (label_column, weight_column) if c is not None]:
        if col not in df.columns:
            raise KeyError(
                f"Column '{col}' not found in DataFrame. "
                f"Available columns: {list(df.columns)}"
            )

    if label_column is not None and text_columns and label_column in text_columns:
        raise ValueError(f"Label column '{label_column}' cannot also be a text column")

    categorical = set(categorical_columns or [])
    if label_column is not None:
        categorical.add(label_column)

    attributes: List[Attribute] = []
    label_index: Optional[int] = None
    for col in df.columns:
        if col == weight_column:
            continue
        series = df[col]
        col_name = str(col)

        if col == label_column:
            label_index = len(attributes)

        if text_columns is not None and col in text_columns:
            attributes.append(Attribute(col_name, AttributeType.TEXT))
        elif col in categorical:
            attributes.append(
                Attribute(col_name, AttributeType.CATEGORICAL, _category_labels(series))
            )
        elif _is_text_dtype(series):
            if text_columns is None:
                attributes.append(Attribute(col_name, AttributeType.TEXT))
            else:
                attributes.append(
                    Attribute(col_name, AttributeType.CATEGORICAL, _category_labels(series))
                )
        else:
            attributes.append(Attribute(col_name, AttributeType.NUMERIC))

    return Schema(attributes, label_index=label_index, name=name)


# ---------------------------------------------------------------------------
# Row conversion
# ---------------------------------------------------------------------------


def _convert_value(attribute: Attribute, value: Any) -> Any:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    if attribute.type == AttributeType.TEXT:
        return str(value)
    if attribute.type == AttributeType.CATEGORICAL:
        return float(attribute.index_of_value(str(value)))
    return float(value)


def dataframe_to_records(
    df: pd.DataFrame,
    schema: Schema,
    weight_column: Optional[str] = None,
) -> List[Record]:
    """
    Convert DataFrame rows into records conforming to ``schema``.

    Parameters
    ----------
    df : pd.DataFrame
        Input data containing every attribute of the schema.
    schema : Schema
        Target schema; columns are matched by attribute name.
    weight_column : Optional[str]
        Column holding record weights. Weights default to 1.0.

    Returns
    -------
    List[Record]
        One record per row, in row order.

    Raises
    ------
    KeyError
        If a schema attribute has no matching column.
    ValueError
        If a categorical value is not one of the schema's labels.
    """
    columns = {str(c): c for c in df.columns}
    missing_cols = [att.name for att in schema if att.name not in columns]
    if missing_cols:
        raise KeyError(
            f"Missing required column(s) in DataFrame: {missing_cols}. "
            f"Available columns: {list(df.columns)}"
        )

    frame = df[[columns[att.name] for att in schema]]
    weights = df[weight_column].astype(float).tolist() if weight_column else None

    records: List[Record] = []
    for row_pos, row in enumerate(frame.itertuples(index=False, name=None)):
        values = [_convert_value(att, v) for att, v in zip(schema, row)]
        weight = weights[row_pos] if weights is not None else 1.0
        records.append(Record(values, weight=weight))
    return records


def dataframe_to_dataset(
    df: pd.DataFrame,
    text_columns: Optional[Sequence[str]] = None,
    label_column: Optional[str] = None,
    categorical_columns: Optional[Sequence[str]] = None,
    weight_column: Optional[str] = None,
    name: str = "dataset",
) -> Tuple[Schema, List[Record]]:
    """
    Infer a schema from a DataFrame and convert its rows into records.

    See ``infer_schema`` for how column types are decided.
    """
    schema = infer_schema(
        df,
        text_columns=text_columns,
        label_column=label_column,
        categorical_columns=categorical_columns,
        weight_column=weight_column,
        name=name,
    )
    records = dataframe_to_records(df, schema, weight_column=weight_column)
    return schema, records


# ---------------------------------------------------------------------------
# CSV loading
# ---------------------------------------------------------------------------


def get_dataset_config(
    config_path: str = DEFAULT_FILTER_CONFIG_PATH,
) -> Dict[str, Any]:
    cfg = load_filter_config(config_path)
    return cfg["dataset"] or {}


def load_dataset(
    csv_path: Optional[str] = None,
    config_path: str = DEFAULT_FILTER_CONFIG_PATH,
    schema: Optional[Schema] = None,
    label_column: Optional[str] = None,
) -> Tuple[Schema, List[Record]]:
    """
    Load a CSV file into a (Schema, records) pair according to the
    dataset section of the configuration.

    Parameters
    ----------
    csv_path : Optional[str]
        Path to the CSV file. Defaults to ``dataset.path`` from the config.
    config_path : str
        Path to the filter YAML configuration file.
    schema : Optional[Schema]
        Existing schema (typically the training schema) to convert rows
        with. If None, a schema is inferred from the file.
    label_column : Optional[str]
        Overrides ``dataset.label_column`` when inferring the schema.

    Returns
    -------
    Tuple[Schema, List[Record]]
        The schema and one record per CSV row.

    Raises
    ------
    FileNotFoundError
        If the CSV file cannot be found.
    """
    dataset_cfg = get_dataset_config(config_path)
    csv_path = csv_path or dataset_cfg.get("path", "data/raw/dataset.csv")
    weight_column = dataset_cfg.get("weight_column")

    if not os.path.exists(csv_path):
        raise FileNotFoundError(f"Dataset CSV not found at: {csv_path}")

    df = pd.read_csv(csv_path)

    if dataset_cfg.get("drop_duplicates", False):
        df = df.drop_duplicates(keep="first").reset_index(drop=True)

    if schema is None:
        schema = infer_schema(
            df,
            text_columns=dataset_cfg.get("text_columns"),
            label_column=label_column or dataset_cfg.get("label_column"),
            categorical_columns=dataset_cfg.get("categorical_columns"),
            weight_column=weight_column,
            name=dataset_cfg.get("name", os.path.splitext(os.path.basename(csv_path))[0]),
        )

    records = dataframe_to_records(df, schema, weight_column=weight_column)
    return schema, records
