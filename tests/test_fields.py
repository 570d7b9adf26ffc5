from datetime import date, datetime

import pytest

from core.datawriter.fields import (
    NULL,
    ZERO_DATETIME,
    BoolField,
    BytesField,
    DateTimeField,
    FloatField,
    IntField,
    Nullable,
    TextField,
    UnsupportedTypeError,
    format_datetime,
    format_float,
    resolve_field,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, NULL),
        (Nullable(None), NULL),
        (True, BoolField(True)),
        (0, IntField(0)),
        (1.5, FloatField(1.5)),
        ("x", TextField("x")),
        (b"x", BytesField(b"x")),
        (bytearray(b"x"), BytesField(b"x")),
        (datetime(2020, 1, 2, 3, 4, 5), DateTimeField(datetime(2020, 1, 2, 3, 4, 5))),
        (date(2020, 1, 2), DateTimeField(datetime(2020, 1, 2))),
        (Nullable(7), IntField(7)),
    ],
)
def test_resolve_field(value, expected):
    assert resolve_field(value) == expected


def test_bool_is_not_resolved_as_int():
    assert isinstance(resolve_field(False), BoolField)


def test_explicit_fields_pass_through():
    field = IntField(3, width=8, signed=False)
    assert resolve_field(field) is field
    assert resolve_field(Nullable(field)) is field


def test_unsupported_type_reports_position():
    with pytest.raises(UnsupportedTypeError) as excinfo:
        resolve_field({1, 2}, position=3)
    assert excinfo.value.position == 3
    assert "set" in str(excinfo.value)
    assert isinstance(excinfo.value, TypeError)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"value": 128, "width": 8},
        {"value": -129, "width": 8},
        {"value": 256, "width": 8, "signed": False},
        {"value": -1, "width": 32, "signed": False},
        {"value": -1, "signed": False},
        {"value": 1, "width": 12},
    ],
)
def test_int_field_range(kwargs):
    with pytest.raises(ValueError):
        IntField(**kwargs)


def test_int_field_bounds():
    assert IntField(-128, width=8).render() == "-128"
    assert IntField(127, width=8).render() == "127"
    assert IntField(2**63 - 1, width=64).render() == "9223372036854775807"


def test_float_field_width():
    with pytest.raises(ValueError):
        FloatField(1.0, width=16)
    assert FloatField(2.5, width=32).render() == "2.5"


def test_format_float_has_no_exponent():
    assert format_float(1.5e-10) == "0.00000000015"
    assert format_float(2.0**70) == "1180591620717411300000"
    assert format_float(5e-324).startswith("0.000")


def test_format_datetime():
    assert format_datetime(ZERO_DATETIME) == "0000-00-00 00:00:00"
    assert format_datetime(datetime(1999, 12, 31, 23, 59, 59, 999999)) == "1999-12-31 23:59:59"


@pytest.mark.parametrize(
    "factory, payload",
    [
        (BoolField, 1),
        (IntField, True),
        (IntField, "1\n2"),
        (IntField, 1.0),
        (FloatField, "2.5"),
        (FloatField, False),
        (TextField, 5),
        (TextField, b"x"),
        (BytesField, "x"),
        (DateTimeField, date(2020, 1, 2)),
        (DateTimeField, "2020-01-02 00:00:00"),
    ],
)
def test_field_payload_type_is_checked(factory, payload):
    with pytest.raises(UnsupportedTypeError):
        factory(payload)


def test_explicit_fields_accept_matching_payloads():
    assert FloatField(3).render() == "3"
    assert BytesField(bytearray(b"ab")).content() == b"ab"
    assert BytesField(memoryview(b"ab")).content() == b"ab"
    assert BoolField(False).render() == "0"
