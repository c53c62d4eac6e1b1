import io

import pytest

from arscdecode.errors import DecodeError, IndexOutOfBounds, UnexpectedEndOfData
from arscdecode.string_pool import StringPool, StringPoolDecoder, StringPoolWrapper

from builders import build_string_pool, narrow_string, pool_header, utf8_string


def make_pool(encoded_strings, prefix=b"", **kwargs):
    raw, offsets = build_string_pool(encoded_strings, **kwargs)
    data = prefix + raw
    header = pool_header(raw, offset=len(prefix))
    return StringPool(StringPoolWrapper(data, header)), data


def test_counts():
    pool, _ = make_pool([utf8_string("a"), utf8_string("b")], style_offsets=[0], flags=0x100)
    assert pool.get_strings_len() == 2
    assert pool.get_styles_len() == 1
    assert pool.wrapper.get_flags() == 0x100
    assert len(pool) == 2


def test_single_byte_length():
    pool, data = make_pool([utf8_string("cat")])
    assert b"\x03\x03cat" in data
    assert pool.get_string(0) == "cat"


def test_single_byte_length_multibyte_utf8():
    pool, _ = make_pool([utf8_string("é")])
    assert pool.get_string(0) == "é"


def test_two_byte_length_keeps_even_bytes():
    pool, data = make_pool([narrow_string("hi")])
    assert b"\x02\x00h\x00i\x00" in data
    assert pool.get_string(0) == "hi"


def test_two_byte_length_uses_high_byte():
    text = "x" * 300
    pool, _ = make_pool([narrow_string(text)])
    assert pool.get_string(0) == text


def test_strings_resolve_through_offsets_table():
    strings = ["app_name", "hello", "", "activity_main"]
    encoded = [narrow_string("app_name"), utf8_string("hello"), utf8_string(""), utf8_string("activity_main")]
    pool, _ = make_pool(encoded)
    assert [pool.get_string(i) for i in range(len(strings))] == strings


def test_chunk_at_non_zero_offset():
    pool, _ = make_pool([utf8_string("first"), utf8_string("second")], prefix=b"\xAA" * 36)
    assert pool.get_string(0) == "first"
    assert pool.get_string(1) == "second"


def test_index_past_count_fails():
    pool, _ = make_pool([utf8_string("cat"), utf8_string("dog")])
    with pytest.raises(IndexOutOfBounds):
        pool.get_string(3)
    with pytest.raises(IndexOutOfBounds):
        pool.wrapper.get_string(3)


def test_negative_index_fails(monkeypatch):
    pool, _ = make_pool([utf8_string("cat"), utf8_string("dog")])
    with pytest.raises(IndexOutOfBounds):
        pool.wrapper.get_string(-5)

    calls = []
    monkeypatch.setattr(pool.wrapper, "get_string", lambda idx: calls.append(idx))
    with pytest.raises(IndexOutOfBounds):
        pool.get_string(-1)
    with pytest.raises(IndexOutOfBounds):
        pool[-1]
    assert calls == []


def test_index_equal_to_count_is_not_rejected():
    # The bound check lets idx == count through: the offset is then read from
    # the style offsets following the string offsets, here pointing at "cat".
    pool, _ = make_pool([utf8_string("cat"), utf8_string("dog")], style_offsets=[0])
    assert pool.wrapper.get_string(2) == "cat"
    assert pool.get_string(2) == "cat"


def test_invalid_utf8():
    pool, _ = make_pool([bytes([2, 2]) + b"\xff\xfe"])
    with pytest.raises(DecodeError):
        pool.get_string(0)


def test_string_beyond_buffer():
    raw, _ = build_string_pool([utf8_string("cat")])
    truncated = raw[:-4]
    pool = StringPool(StringPoolWrapper(truncated, pool_header(raw)))
    with pytest.raises(UnexpectedEndOfData):
        pool.get_string(0)


def test_truncated_header():
    raw, _ = build_string_pool([utf8_string("cat")])
    pool = StringPool(StringPoolWrapper(raw[:10], pool_header(raw)))
    with pytest.raises(UnexpectedEndOfData):
        pool.get_strings_len()


def test_cache_returns_shared_string_without_decoding_again(monkeypatch):
    pool, _ = make_pool([utf8_string("cat"), utf8_string("dog")])
    calls = []
    decode = pool.wrapper.get_string

    def counting_get_string(idx):
        calls.append(idx)
        return decode(idx)

    monkeypatch.setattr(pool.wrapper, "get_string", counting_get_string)

    first = pool.get_string(1)
    second = pool.get_string(1)
    assert first == second == "dog"
    assert first is second
    assert calls == [1]
    assert pool[1] is first
    assert calls == [1]


def test_uncached_bypasses_cache(monkeypatch):
    pool, _ = make_pool([utf8_string("cat")])
    calls = []
    decode = pool.wrapper.get_string

    def counting_get_string(idx):
        calls.append(idx)
        return decode(idx)

    monkeypatch.setattr(pool.wrapper, "get_string", counting_get_string)

    assert pool.get_uncached_string(0) == "cat"
    assert pool.get_uncached_string(0) == "cat"
    assert calls == [0, 0]

    assert pool.get_string(0) == "cat"
    assert calls == [0, 0, 0]


def test_failed_decode_is_not_cached(monkeypatch):
    pool, _ = make_pool([bytes([2, 2]) + b"\xff\xfe"])
    calls = []
    decode = pool.wrapper.get_string

    def counting_get_string(idx):
        calls.append(idx)
        return decode(idx)

    monkeypatch.setattr(pool.wrapper, "get_string", counting_get_string)

    for _ in range(2):
        with pytest.raises(DecodeError):
            pool.get_string(0)
    assert calls == [0, 0]


def test_iteration():
    pool, _ = make_pool([utf8_string("a"), narrow_string("bc")])
    assert list(pool) == ["a", "bc"]


def test_display_enumerates_strings():
    pool, _ = make_pool([utf8_string("cat"), narrow_string("hi")])
    assert str(pool) == "0 - cat\n1 - hi\n"


def test_display_substitutes_placeholder(log_messages):
    pool, _ = make_pool([utf8_string("cat"), bytes([2, 2]) + b"\xff\xfe", utf8_string("dog")])
    assert str(pool) == "0 - cat\n1 - <UNKNOWN>\n2 - dog\n"
    assert any("String 1" in m for m in log_messages)


def test_iter_uncached_pairs_index_and_text(log_messages):
    pool, _ = make_pool([utf8_string("cat"), bytes([2, 2]) + b"\xff\xfe"])
    assert list(pool.iter_uncached()) == [(0, "cat"), (1, "<UNKNOWN>")]
    assert any("String 1" in m for m in log_messages)


def test_repr():
    pool, _ = make_pool([utf8_string("cat")], prefix=b"\x00" * 4)
    assert repr(pool) == "<StringPool #strings=1, #styles=0 @4>"


def test_repr_of_truncated_pool():
    raw, _ = build_string_pool([utf8_string("cat")])
    pool = StringPool(StringPoolWrapper(raw[:10], pool_header(raw)))
    assert repr(pool) == "<StringPool #strings=?, #styles=? @0>"


def test_decoder_uses_cursor_buffer():
    raw, _ = build_string_pool([utf8_string("cat")])
    data = b"\x00" * 8 + raw
    cursor = io.BytesIO(data)
    pool = StringPoolDecoder.decode(cursor, pool_header(raw, offset=8))
    assert isinstance(pool, StringPool)
    assert pool.get_string(0) == "cat"


def test_repeated_decode_is_deterministic():
    raw, _ = build_string_pool([utf8_string("cat"), narrow_string("hi")])
    snapshot = bytes(raw)
    first = StringPoolDecoder.decode(io.BytesIO(raw), pool_header(raw))
    second = StringPoolDecoder.decode(io.BytesIO(raw), pool_header(raw))
    assert list(first) == list(second) == ["cat", "hi"]
    assert raw == snapshot
