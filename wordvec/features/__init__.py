"""
Text feature extraction utilities.

This subpackage includes:
- delimiter-based tokenization of text fields
- the dictionary builder (per-label word counting and pruning)
- the sparse vector encoder
- a scikit-learn transformer wrapping the word vector filter.
"""
