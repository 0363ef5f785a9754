"""ASCII piano-roll preview of a riff.

One row per pitch, highest first, one column per step::

	bassline  root=C2  16 steps  clamp_to_next_onset
	  G2    |. . . . . . . . O - . . . . . .|
	  C2    |X - . . o . . . . . . . X - - -|

``X``/``O``/``o``/``.`` show velocity at an onset, ``-`` a note still
sounding.
"""

import typing

import midiriff.constants
import midiriff.riff


_NOTE_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

_LABEL_WIDTH = 6
_SUSTAIN = -1


def midi_note_name (pitch: int) -> str:

	"""
	Convert a MIDI note number to a human-readable name.

	Examples: 60 → ``"C4"``, 42 → ``"F#2"``, 36 → ``"C2"``.
	"""

	octave = (pitch // 12) - 1
	note = _NOTE_NAMES[pitch % 12]
	return f"{note}{octave}"


def velocity_char (velocity: int) -> str:

	"""Map a MIDI velocity (0-127), or the sustain marker, to one character."""

	if velocity == _SUSTAIN:
		return "-"
	if velocity <= 40:
		return "."
	if velocity <= 80:
		return "o"
	if velocity <= 110:
		return "O"
	return "X"


def build_velocity_grid (riff: midiriff.riff.Riff) -> typing.Dict[int, typing.List[int]]:

	"""
	Return ``{pitch: [velocity per step]}`` with sustain markers filled in.

	The loudest onset wins a cell.  Sustain never overwrites an onset and
	stops at the end of the loop.
	"""

	grid: typing.Dict[int, typing.List[int]] = {}
	columns = riff.loop_steps

	for note in riff.events:

		if not 0 <= note.step < columns:
			continue

		row = grid.setdefault(note.pitch, [0] * columns)
		velocity = int(round(note.velocity01 * midiriff.constants.MAX_VELOCITY))

		if velocity > row[note.step]:
			row[note.step] = velocity

		for s in range(note.step + 1, min(note.step + note.duration_steps, columns)):
			if row[s] == 0:
				row[s] = _SUSTAIN

	return grid


def render_grid (riff: midiriff.riff.Riff) -> typing.List[str]:

	"""Render the riff as a header line plus one row per pitch."""

	lines = [
		f"{riff.id}  root={midi_note_name(riff.root_pitch)}  {riff.loop_steps} steps  {riff.overlap_policy.value}"
	]

	grid = build_velocity_grid(riff)

	for pitch in sorted(grid, reverse=True):
		label = midi_note_name(pitch).ljust(_LABEL_WIDTH)
		cells = " ".join(velocity_char(v) for v in grid[pitch])
		lines.append(f"  {label}|{cells}|")

	return lines
