"""
Batch filters.

This subpackage offers:
- the two-phase batch-filter protocol shared by every filter, and the
  errors it raises
- StringToWordVector, which builds a dictionary on the first batch and
  encodes records into sparse word vectors
- AddAttribute, which inserts an always-missing column into the schema.
"""
