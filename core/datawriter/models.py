from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict


LineEnding = Literal["lf", "crlf"]
EscapeStyle = Literal["default", "mysql"]
ColumnType = Literal["auto", "bytes_b64", "datetime", "date"]

# JSON で表現できるセル値（bytes / 日時は column_types で指定して文字列から変換する）
CellValue = Optional[Union[bool, int, float, str]]


class WriterConfig(BaseModel):
    """DataWriter に渡す出力設定"""

    delimiter: str = ","
    quote_char: str = '"'
    line_ending: LineEnding = "lf"
    escape_style: EscapeStyle = "default"

    @field_validator("delimiter", "quote_char")
    @classmethod
    def _single_character(cls, value: str) -> str:
        if len(value) != 1:
            raise ValueError("must be a single character")
        return value

    @property
    def line_end(self) -> str:
        return "\r\n" if self.line_ending == "crlf" else "\n"


class EncodeResult(BaseModel):
    data_b64: str
    rows: int = 0
    byte_count: int = 0


class EncodeResponse(BaseModel):
    result: EncodeResult
    meta: Dict[str, Any]


class EncodeRequest(WriterConfig):
    """
    LOAD DATA Writer API (v0.1) リクエストモデル

    - rows         : 出力するレコードの配列（セルは null / bool / 数値 / 文字列）
    - column_types : 列ごとの変換ヒント。省略時はすべて "auto"
        - auto      : JSON の値をそのまま使う
        - bytes_b64 : Base64 文字列をバイト列として扱う
        - datetime  : ISO-8601 文字列を日時として扱う
        - date      : ISO-8601 文字列を日付として扱う
    """

    rows: List[List[CellValue]] = Field(default_factory=list)
    column_types: Optional[List[ColumnType]] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "rows": [["hallo", 1, True, None], ["welt", 2, False, 2.5]],
                "delimiter": ",",
                "quote_char": '"',
                "line_ending": "lf",
            }
        }
    )
