"""Post-quantization clean-up passes.

Run ``clamp_durations_to_next_onset`` before ``dedupe_same_step_same_pitch``:
the clamp needs every colliding onset still present to find the next one.
"""

import dataclasses
import typing

import midiriff.riff


def clamp_durations_to_next_onset (
	notes: typing.List[midiriff.riff.QuantizedNote],
	steps_per_bar: int,
) -> typing.List[midiriff.riff.QuantizedNote]:

	"""
	Shorten each note so it stops at the next onset of the same pitch.

	The last note of a pitch may sustain to the end of the bar.  Pitches are
	handled independently, giving monophonic articulation per pitch while
	chords stay intact.  Notes are modified in place; the same list is
	returned for chaining.
	"""

	by_pitch: typing.Dict[int, typing.List[midiriff.riff.QuantizedNote]] = {}

	for note in notes:
		by_pitch.setdefault(note.pitch, []).append(note)

	for group in by_pitch.values():

		ordered = sorted(group, key=lambda n: n.step)

		for i, note in enumerate(ordered):
			next_step = ordered[i + 1].step if i < len(ordered) - 1 else steps_per_bar
			max_duration = max(1, min(next_step - note.step, steps_per_bar))

			if note.duration_steps > max_duration:
				note.duration_steps = max_duration

	return notes


def dedupe_same_step_same_pitch (notes: typing.Iterable[midiriff.riff.QuantizedNote]) -> typing.List[midiriff.riff.QuantizedNote]:

	"""
	Collapse notes sharing a (step, pitch) into one.

	The loudest note wins (the earliest one on a tie) and takes the longest
	duration found in its group.  Returns new notes in first-seen group order;
	the input is left untouched, so running this twice changes nothing.
	"""

	groups: typing.Dict[typing.Tuple[int, int], typing.List[midiriff.riff.QuantizedNote]] = {}

	for note in notes:
		groups.setdefault((note.step, note.pitch), []).append(note)

	result: typing.List[midiriff.riff.QuantizedNote] = []

	for group in groups.values():

		loudest = group[0]
		for note in group[1:]:
			if note.velocity01 > loudest.velocity01:
				loudest = note

		result.append(dataclasses.replace(loudest, duration_steps=max(n.duration_steps for n in group)))

	return result
