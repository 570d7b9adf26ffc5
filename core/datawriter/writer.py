from __future__ import annotations

import io
import logging
import re
from typing import Any, BinaryIO, Dict, Iterable, Literal, Sequence

from .fields import (
    BytesField,
    DataWriterError,
    Field,
    NullField,
    TextField,
    resolve_field,
)

logger = logging.getLogger(__name__)

EscapeStyle = Literal["default", "mysql"]
ESCAPE_STYLES = ("default", "mysql")

NULL_MARKER = b"\\N"
DEFAULT_BUFFER_SIZE = 4096

# 既定のエスケープ表。バックスラッシュは \b になり、0x08 とクォート文字はそのまま。
# クォート文字を含む文字列を書くと出力がずれるので、必要なら mysql を使うこと。
ESCAPES: Dict[bytes, bytes] = {
    b"\x00": b"\\0",
    b"\\": b"\\b",
    b"\n": b"\\n",
    b"\r": b"\\r",
    b"\t": b"\\t",
    b"\x1a": b"\\Z",
}

# LOAD DATA INFILE ... FIELDS ESCAPED BY '\\' と互換のエスケープ表（クォート文字は別途追加）
MYSQL_ESCAPES: Dict[bytes, bytes] = {
    b"\x00": b"\\0",
    b"\x08": b"\\b",
    b"\\": b"\\\\",
    b"\n": b"\\n",
    b"\r": b"\\r",
    b"\t": b"\\t",
    b"\x1a": b"\\Z",
}


class WriterIOError(DataWriterError, OSError):
    """出力先 (sink) への書き込み失敗をラップする独自例外"""

    pass


def _single_char(name: str, value: str) -> str:
    if not isinstance(value, str) or len(value) != 1:
        raise ValueError(f"{name} must be a single character, got {value!r}")
    return value


def build_escape_table(quote: str, style: EscapeStyle = "default") -> Dict[bytes, bytes]:
    """style に応じたエスケープ表を返す（mysql の場合はクォート文字も含める）"""
    if style == "default":
        return dict(ESCAPES)
    if style != "mysql":
        raise ValueError(f"unknown escape style {style!r}")
    table = dict(MYSQL_ESCAPES)
    quote_bytes = quote.encode("utf-8")
    table[quote_bytes] = b"\\" + quote_bytes
    return table


def escape_bytes(data: bytes, table: Dict[bytes, bytes]) -> bytes:
    """table に従って data をエスケープする"""
    pattern = _compile_table(table)
    return pattern.sub(lambda m: table[m.group(0)], data)


def unescape_bytes(data: bytes, table: Dict[bytes, bytes]) -> bytes:
    """escape_bytes の逆変換（テスト・検証用）"""
    inverse = {v: k for k, v in table.items()}
    pattern = _compile_table(inverse)
    return pattern.sub(lambda m: inverse[m.group(0)], data)


def _compile_table(table: Dict[bytes, bytes]) -> "re.Pattern[bytes]":
    keys = sorted(table, key=len, reverse=True)
    return re.compile(b"|".join(re.escape(k) for k in keys))


class DataWriter:
    """LOAD DATA INFILE で取り込める形式でレコードを書き出すライタ

    sink はバイナリの write() を持つ任意のオブジェクト。出力は内部バッファに
    溜め、buffer_size を超えたときと flush() のときに sink へ渡す。
    sink.write が失敗したバイトはバッファに残り、次の flush() で再送される。
    短い書き込み（raw ストリーム）は全バイト受理されるまで繰り返す。
    sink のクローズは呼び出し側の責務。
    """

    def __init__(
        self,
        sink: BinaryIO,
        *,
        delimiter: str = ",",
        quote: str = '"',
        line_end: str = "\n",
        escape_style: EscapeStyle = "default",
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ) -> None:
        if buffer_size < 1:
            raise ValueError("buffer_size must be positive")
        self._sink = sink
        self._buffer = bytearray()
        self._buffer_size = buffer_size
        self._delimiter = _single_char("delimiter", delimiter)
        self._quote = _single_char("quote", quote)
        self.line_end = line_end
        self._escape_style: EscapeStyle = escape_style
        self._escapes = build_escape_table(self._quote, escape_style)
        self._pattern = _compile_table(self._escapes)

    # ------------------------------------------------------------------
    # 設定
    # ------------------------------------------------------------------

    @property
    def delimiter(self) -> str:
        return self._delimiter

    @delimiter.setter
    def delimiter(self, value: str) -> None:
        self._delimiter = _single_char("delimiter", value)

    @property
    def quote(self) -> str:
        return self._quote

    @quote.setter
    def quote(self, value: str) -> None:
        self._quote = _single_char("quote", value)
        self._rebuild_escapes()

    @property
    def escape_style(self) -> EscapeStyle:
        return self._escape_style

    @escape_style.setter
    def escape_style(self, value: EscapeStyle) -> None:
        if value not in ESCAPE_STYLES:
            raise ValueError(f"unknown escape style {value!r}")
        self._escape_style = value
        self._rebuild_escapes()

    @property
    def escapes(self) -> Dict[bytes, bytes]:
        return dict(self._escapes)

    @property
    def buffered(self) -> int:
        return len(self._buffer)

    def _rebuild_escapes(self) -> None:
        self._escapes = build_escape_table(self._quote, self._escape_style)
        self._pattern = _compile_table(self._escapes)

    # ------------------------------------------------------------------
    # 書き込み
    # ------------------------------------------------------------------

    def write(self, *fields: Any) -> None:
        """1 レコード分のフィールドを書き出す。

        未対応の型が含まれる場合は UnsupportedTypeError。
        途中で失敗しても、それまでに書いたバイトは巻き戻さない。
        """
        delimiter = self._delimiter.encode("utf-8")
        quote = self._quote.encode("utf-8")

        for n, value in enumerate(fields):
            if n > 0:
                self._emit(delimiter)

            field = resolve_field(value, position=n)
            if isinstance(field, NullField):
                self._emit(NULL_MARKER)
                continue

            self._emit(quote)
            self._emit(self._encode(field))
            self._emit(quote)

        self._emit(self.line_end.encode("utf-8"))

    def write_rows(self, rows: Iterable[Sequence[Any]]) -> int:
        """複数レコードを順に書き出し、書いたレコード数を返す"""
        count = 0
        for row in rows:
            self.write(*row)
            count += 1
        logger.debug("wrote %d records (%d bytes buffered)", count, len(self._buffer))
        return count

    def flush(self) -> None:
        """内部バッファを sink に書き出し、sink.flush() があれば呼ぶ"""
        self._drain()
        flush = getattr(self._sink, "flush", None)
        if flush is not None:
            try:
                flush()
            except OSError as exc:
                raise WriterIOError(f"Error while flushing output! {exc}") from exc

    def _encode(self, field: Field) -> bytes:
        if isinstance(field, (TextField, BytesField)):
            return self._pattern.sub(lambda m: self._escapes[m.group(0)], field.content())
        # 数値・日時の標準表現には予約バイトが含まれないのでそのまま出力する
        return field.render().encode("ascii")

    def _emit(self, data: bytes) -> None:
        self._buffer += data
        if len(self._buffer) >= self._buffer_size:
            self._drain()

    def _drain(self) -> None:
        total = len(self._buffer)
        while self._buffer:
            try:
                written = self._sink.write(bytes(self._buffer))
            except OSError as exc:
                raise WriterIOError(f"Error while writing to output! {exc}") from exc
            # BufferedIOBase 互換でない sink は None を返すことがある
            if written is None:
                written = len(self._buffer)
            if written <= 0:
                raise WriterIOError("Error while writing to output! sink accepted no bytes")
            del self._buffer[:written]
        if total:
            logger.debug("flushed %d bytes to sink", total)

    # ------------------------------------------------------------------
    # context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> "DataWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.flush()


def encode_record(fields: Sequence[Any], **options: Any) -> bytes:
    """1 レコードをメモリ上でエンコードして返す簡易ヘルパー"""
    out = io.BytesIO()
    writer = DataWriter(out, **options)
    writer.write(*fields)
    writer.flush()
    return out.getvalue()
