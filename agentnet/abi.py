"""Decoder for the registry's ``getAll()`` return value.

The call returns ``tuple(string repoUrl, address wallet, string name,
uint256 registeredAt, uint256 lastSeen)[]`` in standard head/tail layout.
Only this one shape is supported; the field layout lives in
``GET_ALL_FIELDS`` so a change to the contract's return type is a change to
that table rather than to the decoding loop.
"""

from __future__ import annotations

import binascii
import logging
from typing import List, Sequence, Tuple

from .models import RegistryRecord

WORD_SIZE = 32
# Offset word plus array length word.
MIN_HEAD_SIZE = 2 * WORD_SIZE

GET_ALL_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("repo_url", "string"),
    ("wallet", "address"),
    ("name", "string"),
    ("registered_at", "uint256"),
    ("last_seen", "uint256"),
)

_LOGGER = logging.getLogger(__name__)


class OutOfRange(IndexError):
    """A read would run past the end of the buffer."""


class WordReader:
    """Bounds-checked reads of 32-byte words from an ABI-encoded buffer."""

    def __init__(self, data: bytes) -> None:
        self.data = data

    def __len__(self) -> int:
        return len(self.data)

    def _slice(self, start: int, length: int) -> bytes:
        end = start + length
        if start < 0 or end > len(self.data):
            raise OutOfRange(f"read [{start}:{end}] past buffer of {len(self.data)} bytes")
        return self.data[start:end]

    def read_word(self, offset: int) -> bytes:
        return self._slice(offset, WORD_SIZE)

    def read_uint(self, offset: int) -> int:
        return int.from_bytes(self.read_word(offset), "big")

    def read_address(self, offset: int) -> str:
        return "0x" + self.read_word(offset)[-20:].hex()

    def read_string(self, offset: int) -> str:
        """Read a length-prefixed string whose length word sits at ``offset``.

        Bytes map one-to-one onto characters and the first zero byte ends the
        string, whatever the declared length says.
        """

        length = self.read_uint(offset)
        raw = self._slice(offset + WORD_SIZE, length)
        nul = raw.find(b"\x00")
        if nul != -1:
            raw = raw[:nul]
        return raw.decode("latin-1")


def _hex_to_bytes(hex_data: str) -> bytes:
    text = (hex_data or "").strip()
    if text[:2].lower() == "0x":
        text = text[2:]
    if len(text) % 2:
        text = text[:-1]
    try:
        return binascii.unhexlify(text)
    except (binascii.Error, ValueError):
        return b""


def _read_field(reader: WordReader, kind: str, head: int, slot: int):
    position = head + slot * WORD_SIZE
    if kind == "string":
        return reader.read_string(head + reader.read_uint(position))
    if kind == "address":
        return reader.read_address(position)
    if kind == "uint256":
        return reader.read_uint(position)
    raise ValueError(f"Unsupported field kind {kind}")


def decode_tuple_array(reader: WordReader, fields: Sequence[Tuple[str, str]]) -> List[dict]:
    """Decode a dynamic array of tuples starting from the first head word.

    Reading stops at the first out-of-range access and whatever was decoded
    before it is returned.
    """

    items: List[dict] = []
    if len(reader) < MIN_HEAD_SIZE:
        return items
    try:
        array_offset = reader.read_uint(0)
        count = reader.read_uint(array_offset)
        elements_start = array_offset + WORD_SIZE
        for index in range(count):
            head = elements_start + reader.read_uint(elements_start + index * WORD_SIZE)
            items.append(
                {name: _read_field(reader, kind, head, slot) for slot, (name, kind) in enumerate(fields)}
            )
    except OutOfRange as exc:
        _LOGGER.warning("abi decode truncated decoded=%s err=%s", len(items), exc)
    return items


def decode_get_all(hex_data: str) -> List[RegistryRecord]:
    reader = WordReader(_hex_to_bytes(hex_data))
    return [RegistryRecord(**item) for item in decode_tuple_array(reader, GET_ALL_FIELDS)]
