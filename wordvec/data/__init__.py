"""
Data representation and loading utilities.

This subpackage provides:
- Attribute, Schema and Record, the tabular structures every filter reads
  and writes
- YAML configuration loading (config/filter.yaml)
- conversion of pandas DataFrames / CSV files into schemas and records.
"""
