from cr_info.query import (
    Command, KindFilter, OutputFormat, Output, FieldSelection, QueryRequest,
    resolve, flatten, project, order_fields, encode, run)
from cr_info.errors import CrInfoError, ConfigError, CatalogError

__all__ = [
    "Command",
    "KindFilter",
    "OutputFormat",
    "Output",
    "FieldSelection",
    "QueryRequest",
    "resolve",
    "flatten",
    "project",
    "order_fields",
    "encode",
    "run",
    "CrInfoError",
    "ConfigError",
    "CatalogError",
]
