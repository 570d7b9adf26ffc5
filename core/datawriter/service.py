from __future__ import annotations

import base64
import binascii
import io
import logging
from datetime import date, datetime
from typing import Any, List, Optional

from .fields import DataWriterError
from .models import EncodeRequest, EncodeResponse, EncodeResult, WriterConfig
from .writer import DataWriter

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"


class InvalidColumnValueError(DataWriterError, ValueError):
    """column_types に従ってセル値を変換できなかったときに投げる独自例外"""

    def __init__(self, row: int, column: int, reason: str) -> None:
        self.row = row
        self.column = column
        super().__init__(f"row {row}, column {column}: {reason}")


# ---------------------------------------------------------------------------
# セル変換
# ---------------------------------------------------------------------------


def _convert_cell(value: Any, column_type: str, row: int, column: int) -> Any:
    """column_type に従って JSON のセル値を DataWriter に渡す値へ変換する"""
    if value is None or column_type == "auto":
        return value

    if not isinstance(value, str):
        raise InvalidColumnValueError(row, column, f"{column_type} column expects a string")

    if column_type == "bytes_b64":
        try:
            return base64.b64decode("".join(value.split()), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise InvalidColumnValueError(row, column, "value is not valid Base64") from exc

    try:
        if column_type == "date":
            return date.fromisoformat(value)
        return datetime.fromisoformat(value)
    except ValueError as exc:
        raise InvalidColumnValueError(row, column, f"value is not an ISO-8601 {column_type}") from exc


def _convert_rows(rows: List[List[Any]], column_types: Optional[List[str]]) -> List[List[Any]]:
    if not column_types:
        return rows

    converted: List[List[Any]] = []
    for r, row in enumerate(rows, start=1):
        converted.append(
            [
                _convert_cell(
                    cell,
                    column_types[c] if c < len(column_types) else "auto",
                    r,
                    c + 1,
                )
                for c, cell in enumerate(row)
            ]
        )
    return converted


# ---------------------------------------------------------------------------
# API エントリーポイント
# ---------------------------------------------------------------------------


def new_writer(sink: Any, config: WriterConfig) -> DataWriter:
    """WriterConfig から DataWriter を組み立てる"""
    return DataWriter(
        sink,
        delimiter=config.delimiter,
        quote=config.quote_char,
        line_end=config.line_end,
        escape_style=config.escape_style,
    )


def encode_rows(request: EncodeRequest) -> EncodeResponse:
    """LOAD DATA Writer API のメイン処理"""

    # 1) column_types に従ってセル値を変換
    rows = _convert_rows(request.rows, request.column_types)

    # 2) メモリ上に書き出す
    output = io.BytesIO()
    with new_writer(output, request) as writer:
        count = writer.write_rows(rows)

    data = output.getvalue()
    logger.debug("encoded %d rows into %d bytes", count, len(data))

    # 3) レスポンス生成
    return EncodeResponse(
        result=EncodeResult(
            data_b64=base64.b64encode(data).decode("ascii"),
            rows=count,
            byte_count=len(data),
        ),
        meta={
            "version": API_VERSION,
            "effective_config": request.model_dump(
                include={"delimiter", "quote_char", "line_ending", "escape_style"}
            ),
        },
    )
