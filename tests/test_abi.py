from __future__ import annotations

import pytest

from agentnet.abi import OutOfRange, WordReader, decode_get_all
from helpers import encode_registry, record


def test_decodes_records_in_order():
    records = [
        record("alpha", "https://github.com/alice/alpha", 0x11, registered_at=10, last_seen=20),
        record("beta", "https://github.com/bob/beta.git", 0x22, registered_at=30, last_seen=40),
        record("gamma", "https://example.org/gamma", 0x33, registered_at=2**200, last_seen=2**255),
    ]

    decoded = decode_get_all(encode_registry(records))

    assert decoded == records


def test_empty_array_decodes_to_empty_list():
    data = "0x" + (32).to_bytes(32, "big").hex() + (0).to_bytes(32, "big").hex()
    assert decode_get_all(data) == []


@pytest.mark.parametrize("data", ["", "0x", "0x" + "00" * 31, "0x" + "00" * 63, "not hex at all"])
def test_short_or_invalid_input_is_empty(data):
    assert decode_get_all(data) == []


def test_embedded_nul_truncates_string():
    records = [record("ab\x00cd", "https://github.com/a/b", 0x01)]
    assert decode_get_all(encode_registry(records))[0].name == "ab"


def test_non_ascii_bytes_pass_through():
    records = [record("caf\xe9\x07", "https://github.com/a/b", 0x01)]
    assert decode_get_all(encode_registry(records))[0].name == "caf\xe9\x07"


def test_address_is_lowercase_right_aligned():
    data = encode_registry([record("x", "https://github.com/a/b", 0xAB)])
    assert decode_get_all(data)[0].wallet == "0x" + "ab" * 20


def test_truncated_buffer_returns_records_decoded_so_far():
    records = [
        record("first", "https://github.com/a/first", 0x01),
        record("second", "https://github.com/a/second", 0x02),
    ]
    data = encode_registry(records)

    decoded = decode_get_all(data[:-80])

    assert decoded == records[:1]


def test_huge_array_length_does_not_raise():
    data = "0x" + (32).to_bytes(32, "big").hex() + (2**200).to_bytes(32, "big").hex()
    assert decode_get_all(data) == []


def test_offset_past_buffer_does_not_raise():
    data = "0x" + (2**64).to_bytes(32, "big").hex() + (1).to_bytes(32, "big").hex()
    assert decode_get_all(data) == []


def test_word_reader_bounds():
    reader = WordReader(bytes(64))
    assert reader.read_uint(32) == 0
    with pytest.raises(OutOfRange):
        reader.read_word(33)
