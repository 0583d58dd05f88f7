# src/atlas_stepflow/core/dataset/__init__.py
"""
Handle tabular do Atlas StepFlow (schema, linhas, filtro e cogroup).
"""

from .dataset import Dataset, Row, cogroup
from .schema import ArrayType, DataType, Field, Schema, infer_schema, schema_from_pairs

__all__ = [
    "ArrayType",
    "DataType",
    "Dataset",
    "Field",
    "Row",
    "Schema",
    "cogroup",
    "infer_schema",
    "schema_from_pairs",
]
