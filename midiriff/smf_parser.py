"""Standard MIDI File reader.

Walks the ``MThd`` header and every ``MTrk`` chunk, decoding only what the
riff importer needs: note-on and note-off messages.  Meta events, SysEx and
the remaining channel voice messages are skipped by length.

Structural problems (bad header, SMPTE timing, missing track tag, truncated
data) raise a ``midiriff.errors.SmfError`` subclass and abort the file.
Byte-level problems inside a track are recovered from locally:

- A data byte with no running status to reuse is discarded.
- An unsupported status byte is skipped along with one following byte.  This
  resynchronisation is a lossy heuristic and can land mid-message on corrupt
  files; it is kept for compatibility with riffs imported earlier.
- When events overrun or underrun the chunk's declared length, reading resumes
  at the declared end.

Note-offs are paired with their note-ons as each track is read, so the
returned event list only contains complete notes: one onset event and one
release event per note, merged across tracks in tick order.
"""

import dataclasses
import enum
import logging
import typing

import midiriff.byte_cursor
import midiriff.constants
import midiriff.diagnostics
import midiriff.errors
import midiriff.note_pairing

logger = logging.getLogger(__name__)


class ParserState (enum.Enum):

	EXPECT_HEADER = "expect_header"
	READING_TRACKS = "reading_tracks"
	DONE = "done"


@dataclasses.dataclass
class SmfFile:

	"""
	The parts of a MIDI file that the importer uses.
	"""

	format: int
	track_count: int
	ticks_per_quarter: int
	events: typing.List[midiriff.note_pairing.RawTimedEvent] = dataclasses.field(default_factory=list)


class SmfParser:

	"""
	Single-use parser over one file's bytes.

	Example::

		parser = SmfParser(data)
		smf = parser.parse()
		smf.ticks_per_quarter  # 480
	"""

	def __init__ (self, data: bytes, diagnostics: typing.Optional[midiriff.diagnostics.ImportDiagnostics] = None) -> None:

		"""
		Parameters:
			data: Raw file contents.
			diagnostics: Optional counters to update with recovered anomalies.
		"""

		self._cursor = midiriff.byte_cursor.ByteCursor(data)
		self.diagnostics = diagnostics if diagnostics is not None else midiriff.diagnostics.ImportDiagnostics()
		self.state = ParserState.EXPECT_HEADER

		self._events: typing.List[midiriff.note_pairing.RawTimedEvent] = []

	def parse (self) -> SmfFile:

		"""
		Read the whole file and return its merged, tick-sorted note events.
		"""

		if self.state != ParserState.EXPECT_HEADER:
			raise RuntimeError("SmfParser instances can only parse once")

		file_format, track_count, ticks_per_quarter = self._read_header()

		self.diagnostics.format = file_format
		self.diagnostics.track_count = track_count
		self.diagnostics.ticks_per_quarter = ticks_per_quarter

		self.state = ParserState.READING_TRACKS

		for index in range(track_count):
			self._read_track(index)

		# Stable: events on the same tick keep track order, then emission order.
		self._events.sort(key=lambda event: event.tick)

		self.state = ParserState.DONE

		return SmfFile(
			format = file_format,
			track_count = track_count,
			ticks_per_quarter = ticks_per_quarter,
			events = self._events
		)

	# ------------------------------------------------------------------
	# Header
	# ------------------------------------------------------------------

	def _read_header (self) -> typing.Tuple[int, int, int]:

		"""Validate ``MThd`` and return (format, track count, ticks per quarter)."""

		cursor = self._cursor

		if len(cursor) < midiriff.constants.MIN_FILE_LENGTH:
			raise midiriff.errors.InvalidHeader(f"File is {len(cursor)} bytes, too small to be a MIDI file")

		chunk_id = cursor.read_chunk_id()

		if chunk_id != midiriff.constants.HEADER_CHUNK_ID:
			raise midiriff.errors.InvalidHeader(f"Missing MThd header (found {chunk_id!r})")

		header_length = cursor.read_u32_be()

		if header_length < midiriff.constants.MIN_HEADER_LENGTH:
			raise midiriff.errors.InvalidHeader(f"Invalid header length: {header_length}")

		file_format = cursor.read_u16_be()
		track_count = cursor.read_u16_be()
		division = cursor.read_u16_be()

		cursor.skip(header_length - midiriff.constants.MIN_HEADER_LENGTH)

		if division & midiriff.constants.SMPTE_DIVISION_FLAG:
			raise midiriff.errors.UnsupportedTimeDivision(f"SMPTE time division 0x{division:04X} is not supported")

		ticks_per_quarter = division & 0x7FFF

		if ticks_per_quarter <= 0:
			logger.debug(f"Division is zero, using {midiriff.constants.DEFAULT_TICKS_PER_QUARTER} ticks per quarter")
			ticks_per_quarter = midiriff.constants.DEFAULT_TICKS_PER_QUARTER

		return file_format, track_count, ticks_per_quarter

	# ------------------------------------------------------------------
	# Tracks
	# ------------------------------------------------------------------

	def _read_track (self, index: int) -> None:

		"""Read one ``MTrk`` chunk, pairing its notes as they arrive."""

		cursor = self._cursor
		diagnostics = self.diagnostics

		chunk_id = cursor.read_chunk_id()

		if chunk_id != midiriff.constants.TRACK_CHUNK_ID:
			raise midiriff.errors.InvalidTrackChunk(f"Missing MTrk chunk at track {index} (found {chunk_id!r})")

		track_length = cursor.read_u32_be()
		track_end = cursor.position + track_length

		tick = 0
		running_status: typing.Optional[int] = None
		pairer = midiriff.note_pairing.NotePairer()

		while cursor.position < track_end:

			tick += cursor.read_var_length()

			status = cursor.peek_u8()

			if status is None:
				raise midiriff.errors.UnexpectedEndOfData(f"Track {index} ends mid-event at offset {cursor.position}")

			if status < 0x80:

				if running_status is None:
					diagnostics.running_status_errors += 1
					logger.debug(f"Track {index}: data byte 0x{status:02X} with no running status at tick {tick}, skipping")
					cursor.read_u8()
					continue

				status = running_status

			else:
				cursor.read_u8()
				running_status = status

			if status == midiriff.constants.STATUS_META:
				cursor.read_u8()						# meta type, not interpreted
				cursor.skip(cursor.read_var_length())
				continue

			if status in (midiriff.constants.STATUS_SYSEX, midiriff.constants.STATUS_SYSEX_ESCAPE):
				cursor.skip(cursor.read_var_length())
				continue

			self._read_channel_message(status, tick, pairer, index)

		if cursor.position != track_end:
			diagnostics.track_length_mismatches += 1
			logger.debug(f"Track {index}: events ended at offset {cursor.position}, chunk declares {track_end}")
			cursor.position = track_end

		diagnostics.orphan_releases += pairer.orphan_releases
		dangling = pairer.clear()

		if dangling:
			diagnostics.dangling_onsets += dangling
			logger.debug(f"Track {index}: dropped {dangling} note-on(s) with no note-off")

	def _read_channel_message (
		self,
		status: int,
		tick: int,
		pairer: midiriff.note_pairing.NotePairer,
		index: int,
	) -> None:

		"""Decode or skip one channel voice message whose status is already consumed."""

		cursor = self._cursor
		command = status & 0xF0
		channel = status & 0x0F

		if command == midiriff.constants.NOTE_OFF:
			pitch = cursor.read_u8() & 0x7F
			cursor.read_u8()							# release velocity, unused
			self._release(pairer, tick, channel, pitch)

		elif command == midiriff.constants.NOTE_ON:
			pitch = cursor.read_u8() & 0x7F
			velocity = cursor.read_u8() & 0x7F

			if velocity == 0:
				self._release(pairer, tick, channel, pitch)
			else:
				pairer.note_on(tick, channel, pitch, velocity)

		elif command in midiriff.constants.SKIPPED_DATA_LENGTHS:
			cursor.skip(midiriff.constants.SKIPPED_DATA_LENGTHS[command])

		else:
			self.diagnostics.unknown_status_bytes += 1
			logger.debug(f"Track {index}: unsupported status 0x{status:02X} at tick {tick}, skipping one byte")
			cursor.skip(1)

	def _release (self, pairer: midiriff.note_pairing.NotePairer, tick: int, channel: int, pitch: int) -> None:

		"""Close a note and emit its onset/release event pair."""

		note = pairer.note_off(tick, channel, pitch)

		if note is None:
			return

		self._events.append(midiriff.note_pairing.RawTimedEvent(
			tick = note.onset_tick,
			pitch = pitch,
			velocity = note.velocity,
			channel = channel,
			is_onset = True
		))

		self._events.append(midiriff.note_pairing.RawTimedEvent(
			tick = tick,
			pitch = pitch,
			velocity = 0,
			channel = channel,
			is_onset = False
		))


def parse_smf (data: bytes, diagnostics: typing.Optional[midiriff.diagnostics.ImportDiagnostics] = None) -> SmfFile:

	"""
	Parse a Standard MIDI File.

	Parameters:
		data: Raw file contents.
		diagnostics: Optional counters to update with recovered anomalies.

	Raises:
		midiriff.errors.SmfError: The file cannot be read at all.
	"""

	return SmfParser(data, diagnostics).parse()
