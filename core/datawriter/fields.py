from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Union


class DataWriterError(Exception):
    """datawriter パッケージ共通の基底例外"""

    pass


class UnsupportedTypeError(DataWriterError, TypeError):
    """変換規則の無い値が渡されたときに投げる独自例外"""

    def __init__(self, value: Any, position: Optional[int] = None) -> None:
        self.value = value
        self.position = position
        where = "" if position is None else f" at field {position}"
        super().__init__(
            f"Unsupported field value{where}: {value!r} "
            f"has an unsupported type {type(value).__name__}"
        )


# ---------------------------------------------------------------------------
# フィールド種別（閉じた tagged variant）
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NullField:
    """\\N として出力される NULL"""


def _require(value: Any, kinds: tuple, allow_bool: bool = False) -> None:
    """payload の型がフィールド種別と合わなければ UnsupportedTypeError"""
    if isinstance(value, bool) and not allow_bool:
        raise UnsupportedTypeError(value)
    if not isinstance(value, kinds):
        raise UnsupportedTypeError(value)


@dataclass(frozen=True)
class BoolField:
    value: bool

    def __post_init__(self) -> None:
        _require(self.value, (bool,), allow_bool=True)

    def render(self) -> str:
        return "1" if self.value else "0"


_INT_WIDTHS = (8, 16, 32, 64)


@dataclass(frozen=True)
class IntField:
    """整数。width を指定した場合は符号の有無も含めて範囲を検証する。"""

    value: int
    width: Optional[int] = None
    signed: bool = True

    def __post_init__(self) -> None:
        _require(self.value, (int,))
        if self.width is None:
            if not self.signed and self.value < 0:
                raise ValueError(f"unsigned integer field got negative value {self.value}")
            return
        if self.width not in _INT_WIDTHS:
            raise ValueError(f"integer width must be one of {_INT_WIDTHS}, got {self.width}")
        if self.signed:
            low, high = -(1 << (self.width - 1)), (1 << (self.width - 1)) - 1
        else:
            low, high = 0, (1 << self.width) - 1
        if not low <= self.value <= high:
            kind = "int" if self.signed else "uint"
            raise ValueError(f"{self.value} does not fit in {kind}{self.width}")

    def render(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class FloatField:
    """浮動小数点数。width=32 の場合は単精度に丸めてから出力する。"""

    value: float
    width: int = 64

    def __post_init__(self) -> None:
        _require(self.value, (int, float))
        if self.width not in (32, 64):
            raise ValueError(f"float width must be 32 or 64, got {self.width}")

    def render(self) -> str:
        value = float(self.value)
        if self.width == 32:
            value = struct.unpack("<f", struct.pack("<f", value))[0]
        return format_float(value)


@dataclass(frozen=True)
class TextField:
    value: str

    def __post_init__(self) -> None:
        _require(self.value, (str,))

    def content(self) -> bytes:
        return self.value.encode("utf-8")


@dataclass(frozen=True)
class BytesField:
    value: bytes

    def __post_init__(self) -> None:
        _require(self.value, (bytes, bytearray, memoryview))

    def content(self) -> bytes:
        return bytes(self.value)


@dataclass(frozen=True)
class DateTimeField:
    value: datetime

    def __post_init__(self) -> None:
        _require(self.value, (datetime,))

    def render(self) -> str:
        return format_datetime(self.value)


Field = Union[NullField, BoolField, IntField, FloatField, TextField, BytesField, DateTimeField]
FIELD_TYPES = (NullField, BoolField, IntField, FloatField, TextField, BytesField, DateTimeField)

NULL = NullField()

# datetime.min（0001-01-01 00:00:00）を「日付未設定」のゼロ値として扱う
ZERO_DATETIME = datetime.min
ZERO_DATETIME_TEXT = "0000-00-00 00:00:00"


@dataclass(frozen=True)
class Nullable:
    """NULL になりうる参照。value が None なら NULL として出力する。"""

    value: Any = None

    @property
    def is_null(self) -> bool:
        return self.value is None


# ---------------------------------------------------------------------------
# テキスト変換ユーティリティ
# ---------------------------------------------------------------------------


def format_float(value: float) -> str:
    """往復変換可能な最短の 10 進表現を指数表記なしで返す

    - 1.0 -> "1", 2.5 -> "2.5", 1e-07 -> "0.0000001"
    - 非有限値は NaN / +Inf / -Inf
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    return format(Decimal(repr(value)).normalize(), "f")


def format_datetime(value: datetime) -> str:
    if value.replace(tzinfo=None) == ZERO_DATETIME:
        return ZERO_DATETIME_TEXT
    # strftime の %Y は 1000 年未満をゼロ埋めしない環境があるため自前で整形する
    return (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d} "
        f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )


# ---------------------------------------------------------------------------
# 値 -> フィールド解決
# ---------------------------------------------------------------------------


def resolve_field(value: Any, position: Optional[int] = None) -> Field:
    """任意の値を Field に解決する。

    Nullable は一段だけ参照を外す（Nullable の入れ子は未対応の型として扱う）。
    """
    if isinstance(value, FIELD_TYPES):
        return value
    if isinstance(value, Nullable):
        if value.is_null:
            return NULL
        if isinstance(value.value, Nullable):
            raise UnsupportedTypeError(value.value, position)
        return _resolve_plain(value.value, position)
    return _resolve_plain(value, position)


def _resolve_plain(value: Any, position: Optional[int]) -> Field:
    if value is None:
        return NULL
    if isinstance(value, FIELD_TYPES):
        return value
    # bool は int のサブクラスなので先に判定する
    if isinstance(value, bool):
        return BoolField(value)
    if isinstance(value, int):
        return IntField(value)
    if isinstance(value, float):
        return FloatField(value)
    if isinstance(value, str):
        return TextField(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return BytesField(bytes(value))
    if isinstance(value, datetime):
        return DateTimeField(value)
    if isinstance(value, date):
        return DateTimeField(datetime(value.year, value.month, value.day))
    raise UnsupportedTypeError(value, position)
