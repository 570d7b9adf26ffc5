# core/datawriter/__init__.py

"""
LOAD DATA Writer core package.

- fields.py : フィールド種別（tagged variant）と値 -> フィールド解決
- writer.py : DataWriter（クォート・区切り・エスケープ付きの書き出し）
- models.py : Pydantic モデル定義
- service.py: API 用メイン処理（JSON rows -> LOAD DATA 形式）
"""

from .fields import (
    NULL,
    ZERO_DATETIME,
    BoolField,
    BytesField,
    DataWriterError,
    DateTimeField,
    FloatField,
    IntField,
    Nullable,
    NullField,
    TextField,
    UnsupportedTypeError,
    resolve_field,
)
from .writer import (
    ESCAPES,
    MYSQL_ESCAPES,
    DataWriter,
    WriterIOError,
    encode_record,
    escape_bytes,
    unescape_bytes,
)

__all__ = [
    "NULL",
    "ZERO_DATETIME",
    "BoolField",
    "BytesField",
    "DataWriterError",
    "DateTimeField",
    "FloatField",
    "IntField",
    "Nullable",
    "NullField",
    "TextField",
    "UnsupportedTypeError",
    "resolve_field",
    "ESCAPES",
    "MYSQL_ESCAPES",
    "DataWriter",
    "WriterIOError",
    "encode_record",
    "escape_bytes",
    "unescape_bytes",
]
