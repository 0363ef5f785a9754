import typing

import midiriff.errors


class ByteCursor:

	"""
	Sequential big-endian reader over an immutable byte buffer.

	Fixed-width reads raise ``UnexpectedEndOfData`` when the buffer runs out.
	``peek_u8``, ``skip`` and ``read_chunk_id`` never raise: they report the
	end of data through their return value or by clamping the position.

	Example::

		cursor = ByteCursor(b"MThd\\x00\\x00\\x00\\x06")
		cursor.read_chunk_id()  # "MThd"
		cursor.read_u32_be()    # 6
	"""

	def __init__ (self, data: bytes) -> None:

		"""
		Wrap ``data`` with the read position at the start.
		"""

		self._data = bytes(data)
		self._position = 0

	@property
	def position (self) -> int:

		"""Current read offset in bytes."""

		return self._position

	@position.setter
	def position (self, value: int) -> None:

		self._position = max(0, min(value, len(self._data)))

	@property
	def remaining (self) -> int:

		"""Number of unread bytes."""

		return len(self._data) - self._position

	def __len__ (self) -> int:

		return len(self._data)

	def at_end (self) -> bool:

		"""True once every byte has been consumed."""

		return self._position >= len(self._data)

	def read_chunk_id (self) -> typing.Optional[str]:

		"""
		Read a 4-byte ASCII chunk tag.

		Returns ``None`` without moving when fewer than 4 bytes remain, so
		callers can report a missing chunk rather than a truncated read.
		Non-ASCII bytes are replaced, which guarantees a mismatch against
		any real tag.
		"""

		if self.remaining < 4:
			return None

		raw = self._data[self._position:self._position + 4]
		self._position += 4

		return raw.decode("ascii", errors="replace")

	def skip (self, count: int) -> None:

		"""Advance by ``count`` bytes, clamped to the buffer bounds."""

		self.position = self._position + count

	def peek_u8 (self) -> typing.Optional[int]:

		"""Return the next byte without consuming it, or ``None`` at the end."""

		if self._position >= len(self._data):
			return None

		return self._data[self._position]

	def read_u8 (self) -> int:

		"""Read one unsigned byte."""

		if self._position >= len(self._data):
			raise midiriff.errors.UnexpectedEndOfData(f"Need 1 byte at offset {self._position}, buffer is {len(self._data)} bytes")

		value = self._data[self._position]
		self._position += 1
		return value

	def read_u16_be (self) -> int:

		"""Read an unsigned 16-bit big-endian integer."""

		b0 = self.read_u8()
		b1 = self.read_u8()
		return (b0 << 8) | b1

	def read_u32_be (self) -> int:

		"""Read an unsigned 32-bit big-endian integer."""

		value = 0
		for _ in range(4):
			value = (value << 8) | self.read_u8()
		return value

	def read_var_length (self) -> int:

		"""
		Read a MIDI variable-length quantity.

		Each byte carries 7 data bits, most significant group first.  A byte
		with its high bit clear ends the value.  At most 4 bytes are read, so
		the largest value is 0x0FFFFFFF; a fourth byte that still has its high
		bit set is taken as the last one.
		"""

		value = 0

		for _ in range(4):
			b = self.read_u8()
			value = (value << 7) | (b & 0x7F)

			if not b & 0x80:
				break

		return value
