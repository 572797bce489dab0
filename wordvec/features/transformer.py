"""
scikit-learn integration for the word vector filter.

This module provides helpers to:
- wrap StringToWordVector as a scikit-learn transformer working on
  pandas DataFrames
- stack SparseVector outputs into a scipy CSR matrix
- persist and reload a fitted transformer with joblib

The fitted transformer keeps the frozen dictionary of the data it was
fitted on, so ``transform`` encodes new data with the training words.
"""

from __future__ import annotations

import os
from typing import List, Optional, Sequence

import joblib
import numpy as np
import pandas as pd
from scipy.sparse import csr_matrix
from sklearn.base import BaseEstimator, TransformerMixin
from sklearn.utils.validation import check_is_fitted

from wordvec.data.datasets import dataframe_to_dataset, dataframe_to_records
from wordvec.features.dictionary import DEFAULT_WORDS_TO_KEEP
from wordvec.features.encoder import SparseVector
from wordvec.filters.base import use_filter
from wordvec.filters.word_vector import StringToWordVector
from wordvec.utils.filter_utils import ensure_dir_exists


DEFAULT_TRANSFORMER_FILENAME = "word_vector_transformer.joblib"


# ---------------------------------------------------------------------------
# Sparse matrix helpers
# ---------------------------------------------------------------------------


def vectors_to_csr(
    vectors: Sequence[SparseVector],
    width: Optional[int] = None,
) -> csr_matrix:
    """
    Stack sparse vectors into a CSR matrix, one row per vector.

    Parameters
    ----------
    vectors : Sequence[SparseVector]
        Encoded records; all must share the same width.
    width : Optional[int]
        Number of columns. Required when ``vectors`` is empty.

    Returns
    -------
    csr_matrix
        Matrix of shape (len(vectors), width).
    """
    if width is None:
        if not vectors:
            raise ValueError("width is required to stack an empty list of vectors")
        width = vectors[0].width

    indptr = np.zeros(len(vectors) + 1, dtype=np.int64)
    for row, vector in enumerate(vectors):
        if vector.width != width:
            raise ValueError(
                f"Vector {row} has width {vector.width}, expected {width}"
            )
        indptr[row + 1] = indptr[row] + vector.num_values

    if vectors:
        indices = np.concatenate([v.indices for v in vectors])
        data = np.concatenate([v.values for v in vectors])
    else:
        indices = np.zeros(0, dtype=np.int64)
        data = np.zeros(0, dtype=np.float64)

    return csr_matrix((data, indices, indptr), shape=(len(vectors), width))


def vector_weights(vectors: Sequence[SparseVector]) -> np.ndarray:
    return np.array([v.weight for v in vectors], dtype=np.float64)


# ---------------------------------------------------------------------------
# Transformer
# ---------------------------------------------------------------------------


class WordVectorTransformer(BaseEstimator, TransformerMixin):
    """
    DataFrame -> sparse word presence matrix.

    Parameters
    ----------
    words_to_keep : int
        Number of words to attempt to keep (per label value when
        ``label_column`` is set).
    text_columns : Optional[Sequence[str]]
        Columns holding free text. If None, non-numeric columns are text.
    label_column : Optional[str]
        Categorical column whose values partition the word counts. It is
        kept in the output like any other non-text column.
    categorical_columns : Optional[Sequence[str]]
        Columns holding category labels.
    """

    def __init__(
        self,
        words_to_keep: int = DEFAULT_WORDS_TO_KEEP,
        text_columns: Optional[Sequence[str]] = None,
        label_column: Optional[str] = None,
        categorical_columns: Optional[Sequence[str]] = None,
    ) -> None:
        self.words_to_keep = words_to_keep
        self.text_columns = text_columns
        self.label_column = label_column
        self.categorical_columns = categorical_columns

    def _fit_vectors(self, X: pd.DataFrame) -> List[SparseVector]:
        if not isinstance(X, pd.DataFrame):
            raise TypeError(f"Expected a pandas DataFrame, got {type(X).__name__}")

        schema, records = dataframe_to_dataset(
            X,
            text_columns=self.text_columns,
            label_column=self.label_column,
            categorical_columns=self.categorical_columns,
        )
        self.filter_ = StringToWordVector(words_to_keep=self.words_to_keep)
        output_schema, vectors = use_filter(self.filter_, schema, records)

        self.input_schema_ = schema
        self.output_schema_ = output_schema
        self.dictionary_ = self.filter_.dictionary
        self.n_features_out_ = output_schema.num_attributes
        return vectors

    def fit(self, X: pd.DataFrame, y=None) -> "WordVectorTransformer":
        """
        Build the dictionary from the training DataFrame.

        ``y`` is ignored; it is accepted for pipeline compatibility.
        """
        self._fit_vectors(X)
        return self

    def fit_transform(self, X: pd.DataFrame, y=None, **fit_params) -> csr_matrix:
        vectors = self._fit_vectors(X)
        return vectors_to_csr(vectors, width=self.n_features_out_)

    def transform_vectors(self, X: pd.DataFrame) -> List[SparseVector]:
        check_is_fitted(self, "filter_")
        records = dataframe_to_records(X, self.input_schema_)
        for record in records:
            self.filter_.accept(record)
        self.filter_.end_of_batch()
        return self.filter_.drain()

    def transform(self, X: pd.DataFrame) -> csr_matrix:
        """
        Encode a DataFrame with the fitted dictionary.

        Returns
        -------
        csr_matrix
            Matrix of shape (n_samples, n_features_out_).
        """
        vectors = self.transform_vectors(X)
        return vectors_to_csr(vectors, width=self.n_features_out_)

    def get_feature_names_out(self, input_features=None) -> np.ndarray:
        check_is_fitted(self, "output_schema_")
        return np.asarray(self.output_schema_.attribute_names(), dtype=object)


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


def save_transformer(
    transformer: WordVectorTransformer,
    artifacts_dir: str,
    filename: str = DEFAULT_TRANSFORMER_FILENAME,
) -> str:
    """
    Persist a fitted transformer to ``artifacts_dir`` with joblib.

    Returns
    -------
    str
        Full path to the saved file.
    """
    ensure_dir_exists(artifacts_dir)
    path = os.path.join(artifacts_dir, filename)
    joblib.dump(transformer, path)
    return path


def load_transformer(
    artifacts_dir: str,
    filename: str = DEFAULT_TRANSFORMER_FILENAME,
) -> WordVectorTransformer:
    """
    Load a previously saved transformer from disk.

    Raises
    ------
    FileNotFoundError
        If the transformer file does not exist.
    """
    path = os.path.join(artifacts_dir, filename)
    if not os.path.exists(path):
        raise FileNotFoundError(f"Word vector transformer not found at: {path}")

    transformer: WordVectorTransformer = joblib.load(path)
    return transformer
