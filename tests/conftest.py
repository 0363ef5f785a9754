import io
import typing

import mido
import pytest


END_OF_TRACK = b"\x00\xFF\x2F\x00"


def vlq (value: int) -> bytes:

	"""Encode a MIDI variable-length quantity."""

	groups = [value & 0x7F]
	value >>= 7

	while value:
		groups.append((value & 0x7F) | 0x80)
		value >>= 7

	return bytes(reversed(groups))


def header_chunk (track_count: int, division: int = 480, file_format: int = 0, length: int = 6, extra: bytes = b"") -> bytes:

	"""Build an ``MThd`` chunk.  ``extra`` bytes follow the 6 standard fields."""

	return (
		b"MThd"
		+ length.to_bytes(4, "big")
		+ file_format.to_bytes(2, "big")
		+ track_count.to_bytes(2, "big")
		+ division.to_bytes(2, "big")
		+ extra
	)


def track_chunk (body: bytes, length: typing.Optional[int] = None) -> bytes:

	"""Build an ``MTrk`` chunk, optionally lying about its length."""

	if length is None:
		length = len(body)

	return b"MTrk" + length.to_bytes(4, "big") + body


def smf_bytes (*track_bodies: bytes, division: int = 480) -> bytes:

	"""A complete file with one chunk per body."""

	file_format = 0 if len(track_bodies) == 1 else 1
	data = header_chunk(len(track_bodies), division=division, file_format=file_format)

	for body in track_bodies:
		data += track_chunk(body)

	return data


def note_on (delta: int, channel: int, pitch: int, velocity: int) -> bytes:

	return vlq(delta) + bytes([0x90 | channel, pitch, velocity])


def note_off (delta: int, channel: int, pitch: int, velocity: int = 64) -> bytes:

	return vlq(delta) + bytes([0x80 | channel, pitch, velocity])


def mido_bytes (mid: mido.MidiFile) -> bytes:

	"""Serialise a mido file to SMF bytes."""

	buffer = io.BytesIO()
	mid.save(file=buffer)
	return buffer.getvalue()


def mido_track (*messages: typing.Tuple[int, str, int, int, int]) -> mido.MidiTrack:

	"""Build a track from (delta, type, channel, note, velocity) tuples."""

	track = mido.MidiTrack()

	for delta, message_type, channel, note, velocity in messages:
		track.append(mido.Message(message_type, channel=channel, note=note, velocity=velocity, time=delta))

	return track


@pytest.fixture
def single_note_file () -> bytes:

	"""One C4 at tick 0, velocity 100, released at tick 240 (480 ticks per quarter)."""

	return smf_bytes(note_on(0, 0, 60, 100) + note_off(240, 0, 60) + END_OF_TRACK)
