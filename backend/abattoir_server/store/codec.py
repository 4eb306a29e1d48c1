"""
Record codec for the entity stores.

Records are stored as compact UTF-8 JSON. Every encoded row must fit within a
fixed byte bound; an oversize record is rejected with RecordTooLargeError
before it reaches SQLite, never truncated.

Invariants:
    - decode(encode(r)) == r for every record that encodes successfully
    - Nested lists and string-keyed maps survive the round trip
    - The bound is checked on the exact bytes that get stored
    - NaN and infinities are refused; stored JSON is always strict JSON
"""

from __future__ import annotations

import json
from typing import Generic, TypeVar

from ..errors import InvalidPayloadError, RecordTooLargeError, StorageError
from ..models.records import Record

R = TypeVar("R", bound=Record)


class RecordCodec(Generic[R]):
    """Encodes one record kind to bounded bytes and back.

    Example:
        >>> codec = RecordCodec(Animal, max_size=512)
        >>> data = codec.encode(animal)
        >>> codec.decode(data) == animal
        True
    """

    def __init__(self, record_type: type[R], max_size: int = 512) -> None:
        if max_size <= 0:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self.record_type = record_type
        self.max_size = max_size

    @property
    def kind(self) -> str:
        return self.record_type.KIND

    def encode(self, record: R) -> bytes:
        """Encode a record.

        Raises:
            TypeError: If record is not of this codec's kind
            InvalidPayloadError: If the record holds NaN or an infinity
            RecordTooLargeError: If the encoding exceeds max_size
        """
        if not isinstance(record, self.record_type):
            raise TypeError(
                f"{self.kind} codec cannot encode {type(record).__name__}"
            )
        try:
            text = json.dumps(
                record.to_dict(), separators=(",", ":"), ensure_ascii=False, allow_nan=False
            )
        except ValueError as e:
            raise InvalidPayloadError(f"{self.kind} record holds a non-finite number") from e
        data = text.encode("utf-8")
        if len(data) > self.max_size:
            raise RecordTooLargeError(self.kind, len(data), self.max_size)
        return data

    def decode(self, data: bytes) -> R:
        """Decode bytes previously produced by encode.

        Raises:
            StorageError: If the stored bytes are not a valid record
        """
        try:
            return self.record_type.from_dict(json.loads(data.decode("utf-8")))
        except (UnicodeDecodeError, ValueError, TypeError) as e:
            raise StorageError(f"Corrupt {self.kind} row: {e}", store=self.kind) from e
