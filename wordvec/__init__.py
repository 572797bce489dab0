"""
Top-level package for the text-to-word-vector filtering toolkit.

This package contains modules for:
- the tabular schema and record representation
- tokenization, dictionary building, and sparse vector encoding
- two-phase batch filters (word vector, add attribute)
- a scikit-learn compatible transformer around the word vector filter
- shared configuration and logging helpers

Records with free-text fields are turned into sparse vectors of word
presence indicators, one feature per dictionary word, followed by the
record's original non-text fields.
"""

__version__ = "0.1.0"
