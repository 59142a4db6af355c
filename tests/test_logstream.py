import pytest

from reactorkit.logstream import (
    MAX_NUMERIC_SIZE,
    SMALL_BUFFER,
    FixedBuffer,
    Fmt,
    LogStream,
    format_iec,
    format_si,
)


def test_bool_output():
    s = LogStream()
    s << True << False
    assert s.buffer().to_string() == "10"


@pytest.mark.parametrize("value", [0, -1, 123456789, -(2**63), 2**64 - 1])
def test_integer_output(value):
    s = LogStream()
    s << value
    assert s.buffer().to_string() == str(value)


@pytest.mark.parametrize("value, text", [(0.5, "0.5"), (0.25, "0.25"), (-2.5, "-2.5")])
def test_float_output(value, text):
    s = LogStream()
    s << value
    assert s.buffer().to_string() == text


def test_strings_bytes_and_none():
    s = LogStream()
    s << "abc" << 1 << " " << b"xyz" << None
    assert s.buffer().data() == b"abc1 xyz(null)"


def test_pointer_output_is_hex_of_identity():
    obj = object()
    s = LogStream()
    s << obj
    text = s.buffer().to_string()
    assert text.startswith("0x")
    assert int(text[2:], 16) == id(obj)


def test_numeric_dropped_when_little_room():
    s = LogStream()
    s.append(b"x" * (SMALL_BUFFER - (MAX_NUMERIC_SIZE - 1)))
    before = len(s.buffer())
    s << 7
    assert len(s.buffer()) == before
    s << "y"
    assert len(s.buffer()) == before + 1


def test_reset_buffer():
    s = LogStream()
    s << "hello"
    s.reset_buffer()
    assert len(s.buffer()) == 0
    assert s.buffer().avail() == SMALL_BUFFER


def test_stream_of_buffer_and_fmt():
    other = FixedBuffer(16)
    other.append(b"abc")
    s = LogStream()
    s << other << Fmt("%d", 42)
    assert s.buffer().data() == b"abc42"


def test_fixed_buffer_rejects_data_that_does_not_fit():
    buf = FixedBuffer(10)
    buf.append(b"x" * 10)
    assert len(buf) == 0
    buf.append(b"x" * 9)
    assert len(buf) == 9
    assert buf.avail() == 1
    buf.append(b"y")
    assert buf.data() == b"x" * 9


def test_fixed_buffer_bzero_and_reset():
    buf = FixedBuffer(8)
    buf.append(b"ab")
    buf.bzero()
    assert buf.data() == b"\0\0"
    buf.reset()
    assert buf.data() == b""
    assert buf.avail() == 8


def test_fixed_buffer_invalid_size():
    with pytest.raises(ValueError):
        FixedBuffer(0)


def test_fmt():
    f = Fmt("%d", 42)
    assert f.data() == b"42"
    assert len(f) == 2


def test_fmt_rejects_non_numbers_and_long_output():
    with pytest.raises(TypeError):
        Fmt("%s", "x")
    with pytest.raises(ValueError):
        Fmt("%40d", 1)


def test_format_si_pinned():
    assert format_si(0) == "0"
    assert format_si(999) == "999"
    assert format_si(1000) == "1.00k"
    assert format_si(999499) == "999k"


def test_format_iec_pinned():
    assert format_iec(1023) == "1023"
    assert format_iec(1024) == "1.00Ki"


def _boundary_values():
    values = set()
    for power in range(19):
        base = 10**power
        for k in (1, 9995, 99950, 999500):
            for v in (base * k // 1000 if k > 1 else base,):
                for d in (-1, 0, 1):
                    if 0 <= v + d < 2**63:
                        values.add(v + d)
    for power in range(63):
        for d in (-1, 0, 1):
            v = 2**power + d
            if 0 <= v < 2**63:
                values.add(v)
    values.add(2**63 - 1)
    return sorted(values)


def test_format_si_units_progress():
    assert format_si(10**6).endswith("M")
    assert format_si(10**9).endswith("G")
    assert format_si(10**18).endswith("E")
    assert format_iec(2**20).endswith("Mi")
    assert format_iec(2**62).endswith("Ei")