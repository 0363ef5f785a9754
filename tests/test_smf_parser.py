import mido
import pytest

import conftest
import midiriff.diagnostics
import midiriff.errors
import midiriff.smf_parser


def _notes (smf: midiriff.smf_parser.SmfFile) -> list:

	"""(tick, pitch, is_onset) for every event, in order."""

	return [(e.tick, e.pitch, e.is_onset) for e in smf.events]


# ---------------------------------------------------------------------------
# Header
# ---------------------------------------------------------------------------

def test_header_fields (single_note_file: bytes) -> None:

	"""Format, track count and resolution come from MThd."""

	smf = midiriff.smf_parser.parse_smf(single_note_file)

	assert smf.format == 0
	assert smf.track_count == 1
	assert smf.ticks_per_quarter == 480


def test_short_buffer_is_invalid_header () -> None:

	"""Anything shorter than 14 bytes cannot be a MIDI file."""

	with pytest.raises(midiriff.errors.InvalidHeader):
		midiriff.smf_parser.parse_smf(b"MThd\x00\x00\x00\x06\x00")

	with pytest.raises(midiriff.errors.InvalidHeader):
		midiriff.smf_parser.parse_smf(b"")


def test_wrong_header_tag () -> None:

	"""A file that does not start with MThd is rejected."""

	data = b"RIFF" + conftest.header_chunk(1)[4:] + conftest.track_chunk(conftest.END_OF_TRACK)

	with pytest.raises(midiriff.errors.InvalidHeader):
		midiriff.smf_parser.parse_smf(data)


def test_header_length_below_six () -> None:

	"""A declared header length under 6 is rejected."""

	data = conftest.header_chunk(1, length=5) + conftest.track_chunk(conftest.END_OF_TRACK)

	with pytest.raises(midiriff.errors.InvalidHeader):
		midiriff.smf_parser.parse_smf(data)


def test_extra_header_bytes_are_skipped () -> None:

	"""Header bytes beyond the standard 6 are ignored."""

	body = conftest.note_on(0, 0, 60, 100) + conftest.note_off(120, 0, 60) + conftest.END_OF_TRACK
	data = conftest.header_chunk(1, length=9, extra=b"\x01\x02\x03") + conftest.track_chunk(body)

	smf = midiriff.smf_parser.parse_smf(data)

	assert _notes(smf) == [(0, 60, True), (120, 60, False)]


def test_smpte_division_is_unsupported () -> None:

	"""Bit 15 of the division selects SMPTE timing, which is rejected."""

	data = conftest.smf_bytes(conftest.END_OF_TRACK, division=0xE728)

	with pytest.raises(midiriff.errors.UnsupportedTimeDivision):
		midiriff.smf_parser.parse_smf(data)


def test_zero_division_defaults_to_480 () -> None:

	"""A zero resolution falls back to 480 ticks per quarter."""

	data = conftest.smf_bytes(conftest.END_OF_TRACK, division=0)

	assert midiriff.smf_parser.parse_smf(data).ticks_per_quarter == 480


def test_errors_share_a_base_class () -> None:

	"""Every fatal condition can be caught as SmfError."""

	for cls in (
		midiriff.errors.InvalidHeader,
		midiriff.errors.UnsupportedTimeDivision,
		midiriff.errors.InvalidTrackChunk,
		midiriff.errors.UnexpectedEndOfData,
	):
		assert issubclass(cls, midiriff.errors.SmfError)


# ---------------------------------------------------------------------------
# Tracks
# ---------------------------------------------------------------------------

def test_missing_track_tag () -> None:

	"""A declared track that is not MTrk aborts the file."""

	data = conftest.header_chunk(1) + b"XTrk" + (4).to_bytes(4, "big") + conftest.END_OF_TRACK

	with pytest.raises(midiriff.errors.InvalidTrackChunk):
		midiriff.smf_parser.parse_smf(data)


def test_fewer_tracks_than_declared () -> None:

	"""Running out of data before the declared track count is reached is fatal."""

	data = conftest.header_chunk(2) + conftest.track_chunk(conftest.END_OF_TRACK)

	with pytest.raises(midiriff.errors.InvalidTrackChunk):
		midiriff.smf_parser.parse_smf(data)


def test_truncated_event_is_fatal () -> None:

	"""A track whose final message is cut off by the end of the file is fatal."""

	body = conftest.note_on(0, 0, 60, 100) + b"\x00\x80\x3C"
	data = conftest.header_chunk(1) + conftest.track_chunk(body, length=len(body) + 1)

	with pytest.raises(midiriff.errors.UnexpectedEndOfData):
		midiriff.smf_parser.parse_smf(data)


def test_note_pair_emits_onset_and_release (single_note_file: bytes) -> None:

	"""A matched note-on/note-off pair becomes two raw events."""

	smf = midiriff.smf_parser.parse_smf(single_note_file)

	assert len(smf.events) == 2

	onset, release = smf.events

	assert (onset.tick, onset.pitch, onset.velocity, onset.channel, onset.is_onset) == (0, 60, 100, 0, True)
	assert (release.tick, release.pitch, release.velocity, release.channel, release.is_onset) == (240, 60, 0, 0, False)


def test_note_on_velocity_zero_is_release () -> None:

	"""Note-on with velocity 0 closes the note."""

	body = conftest.note_on(0, 3, 64, 90) + conftest.note_on(96, 3, 64, 0) + conftest.END_OF_TRACK
	smf = midiriff.smf_parser.parse_smf(conftest.smf_bytes(body))

	assert _notes(smf) == [(0, 64, True), (96, 64, False)]
	assert smf.events[0].channel == 3


def test_running_status () -> None:

	"""Data bytes with no status byte reuse the previous status."""

	body = (
		b"\x00\x90\x3C\x64"		# note on C4
		+ b"\x00\x40\x50"		# running status: note on E4
		+ b"\x60\x3C\x00"		# running status: C4 off (velocity 0)
		+ b"\x00\x40\x00"		# running status: E4 off
		+ conftest.END_OF_TRACK
	)

	smf = midiriff.smf_parser.parse_smf(conftest.smf_bytes(body))

	assert sorted(_notes(smf)) == [(0, 60, True), (0, 64, True), (96, 60, False), (96, 64, False)]


def test_delta_times_accumulate () -> None:

	"""Deltas add up to absolute ticks within a track."""

	body = (
		conftest.note_on(100, 0, 60, 100)
		+ conftest.note_off(200, 0, 60)
		+ conftest.note_on(300, 0, 62, 100)
		+ conftest.note_off(400, 0, 62)
		+ conftest.END_OF_TRACK
	)

	smf = midiriff.smf_parser.parse_smf(conftest.smf_bytes(body))

	assert _notes(smf) == [(100, 60, True), (300, 60, False), (600, 62, True), (1000, 62, False)]


def test_meta_sysex_and_controllers_are_skipped () -> None:

	"""Non-note messages are skipped by length and never emitted."""

	body = (
		b"\x00\xFF\x51\x03\x07\xA1\x20"		# tempo
		+ b"\x00\xFF\x03\x04bass"				# track name
		+ b"\x00\xF0\x03\x43\x12\xF7"			# sysex
		+ b"\x00\xB0\x07\x64"					# CC volume
		+ b"\x00\xC0\x21"						# program change
		+ b"\x00\xD0\x10"						# channel pressure
		+ b"\x00\xE0\x00\x40"					# pitch bend
		+ b"\x00\xA0\x3C\x20"					# poly aftertouch
		+ conftest.note_on(0, 0, 60, 100)
		+ conftest.note_off(120, 0, 60)
		+ conftest.END_OF_TRACK
	)

	diagnostics = midiriff.diagnostics.ImportDiagnostics()
	smf = midiriff.smf_parser.parse_smf(conftest.smf_bytes(body), diagnostics)

	assert _notes(smf) == [(0, 60, True), (120, 60, False)]
	assert not diagnostics.has_anomalies()


def test_orphan_release_is_discarded () -> None:

	"""A note-off with nothing pending produces nothing and is counted."""

	body = conftest.note_off(0, 0, 60) + conftest.END_OF_TRACK
	diagnostics = midiriff.diagnostics.ImportDiagnostics()

	smf = midiriff.smf_parser.parse_smf(conftest.smf_bytes(body), diagnostics)

	assert smf.events == []
	assert diagnostics.orphan_releases == 1


def test_dangling_onsets_are_dropped_at_track_end () -> None:

	"""Note-ons never released are not carried into the next track."""

	first = conftest.note_on(0, 0, 60, 100) + conftest.END_OF_TRACK
	second = conftest.note_off(240, 0, 60) + conftest.END_OF_TRACK
	diagnostics = midiriff.diagnostics.ImportDiagnostics()

	smf = midiriff.smf_parser.parse_smf(conftest.smf_bytes(first, second), diagnostics)

	assert smf.events == []
	assert diagnostics.dangling_onsets == 1
	assert diagnostics.orphan_releases == 1


def test_overlapping_same_pitch_pairs_lifo () -> None:

	"""The most recent onset of a pitch closes first."""

	body = (
		conftest.note_on(0, 0, 60, 100)
		+ conftest.note_on(100, 0, 60, 80)
		+ conftest.note_off(50, 0, 60)
		+ conftest.note_off(50, 0, 60)
		+ conftest.END_OF_TRACK
	)

	smf = midiriff.smf_parser.parse_smf(conftest.smf_bytes(body))
	onsets = [(e.tick, e.velocity) for e in smf.events if e.is_onset]

	# on 0, on 100, off 150 closes the 100 onset, off 200 closes the 0 onset
	assert onsets == [(0, 100), (100, 80)]
	assert [e.tick for e in smf.events if not e.is_onset] == [150, 200]


def test_data_byte_without_running_status_is_skipped () -> None:

	"""A stray data byte at the start of a track is dropped and parsing continues."""

	body = b"\x00\x3C" + conftest.note_on(0, 0, 62, 100) + conftest.note_off(120, 0, 62) + conftest.END_OF_TRACK
	diagnostics = midiriff.diagnostics.ImportDiagnostics()

	smf = midiriff.smf_parser.parse_smf(conftest.smf_bytes(body), diagnostics)

	assert _notes(smf) == [(0, 62, True), (120, 62, False)]
	assert diagnostics.running_status_errors == 1


def test_unknown_status_skips_one_byte () -> None:

	"""An unsupported status byte is skipped with one data byte, without aborting."""

	body = b"\x00\xF2\x00" + conftest.note_on(0, 0, 62, 100) + conftest.note_off(120, 0, 62) + conftest.END_OF_TRACK
	diagnostics = midiriff.diagnostics.ImportDiagnostics()

	smf = midiriff.smf_parser.parse_smf(conftest.smf_bytes(body), diagnostics)

	assert _notes(smf) == [(0, 62, True), (120, 62, False)]
	assert diagnostics.unknown_status_bytes == 1


def test_trailing_chunk_bytes_do_not_leak_into_next_track () -> None:

	"""Garbage after the last event is read inside its own chunk, then abandoned."""

	first = conftest.note_on(0, 0, 60, 100) + conftest.note_off(120, 0, 60) + conftest.END_OF_TRACK
	second = conftest.note_on(0, 1, 64, 100) + conftest.note_off(240, 1, 64) + conftest.END_OF_TRACK

	# A meta event header whose length byte would come from the next chunk's tag.
	padded = first + b"\x00\xFF\x7F"
	data = conftest.header_chunk(2, file_format=1) + conftest.track_chunk(padded) + conftest.track_chunk(second)

	diagnostics = midiriff.diagnostics.ImportDiagnostics()
	smf = midiriff.smf_parser.parse_smf(data, diagnostics)

	assert sorted(_notes(smf)) == [(0, 60, True), (0, 64, True), (120, 60, False), (240, 64, False)]
	assert diagnostics.track_length_mismatches == 1


def test_declared_track_length_wins_on_overrun () -> None:

	"""When the last event runs past the chunk end, the next track starts at the declared end."""

	first = conftest.note_on(0, 0, 60, 100) + conftest.note_off(120, 0, 60) + b"\x00\xFF\x01\x02a"
	second = conftest.note_on(0, 1, 64, 100) + conftest.note_off(240, 1, 64) + conftest.END_OF_TRACK

	# The text event declares 2 bytes but the chunk holds only 1, so it
	# swallows the "M" of the next chunk's tag before being pulled back.
	data = (
		conftest.header_chunk(2, file_format=1)
		+ conftest.track_chunk(first)
		+ conftest.track_chunk(second)
	)

	diagnostics = midiriff.diagnostics.ImportDiagnostics()
	smf = midiriff.smf_parser.parse_smf(data, diagnostics)

	assert sorted(_notes(smf)) == [(0, 60, True), (0, 64, True), (120, 60, False), (240, 64, False)]
	assert diagnostics.track_length_mismatches == 1


def test_tracks_merge_in_tick_order () -> None:

	"""Events from all tracks are merged by tick, stable for equal ticks."""

	first = conftest.note_on(240, 0, 60, 100) + conftest.note_off(240, 0, 60) + conftest.END_OF_TRACK
	second = conftest.note_on(0, 1, 48, 100) + conftest.note_off(240, 1, 48) + conftest.END_OF_TRACK

	smf = midiriff.smf_parser.parse_smf(conftest.smf_bytes(first, second))

	assert [(e.tick, e.pitch) for e in smf.events] == [(0, 48), (240, 60), (240, 48), (480, 60)]


def test_parser_is_single_use (single_note_file: bytes) -> None:

	"""A parser moves to DONE and refuses to run again."""

	parser = midiriff.smf_parser.SmfParser(single_note_file)
	parser.parse()

	assert parser.state == midiriff.smf_parser.ParserState.DONE

	with pytest.raises(RuntimeError):
		parser.parse()


def test_reads_mido_written_file () -> None:

	"""A type 1 file written by mido parses to the same notes."""

	mid = mido.MidiFile(type=1, ticks_per_beat=96)
	mid.tracks.append(conftest.mido_track(
		(0, 'note_on', 9, 36, 110),
		(24, 'note_off', 9, 36, 0),
		(24, 'note_on', 9, 38, 90),
		(24, 'note_off', 9, 38, 0),
	))
	mid.tracks.append(conftest.mido_track(
		(0, 'note_on', 1, 40, 70),
		(96, 'note_off', 1, 40, 0),
	))

	smf = midiriff.smf_parser.parse_smf(conftest.mido_bytes(mid))

	assert smf.ticks_per_quarter == 96
	assert smf.track_count == 2
	assert sorted((e.tick, e.channel, e.pitch, e.is_onset) for e in smf.events) == [
		(0, 1, 40, True),
		(0, 9, 36, True),
		(24, 9, 36, False),
		(48, 9, 38, True),
		(72, 9, 38, False),
		(96, 1, 40, False),
	]
