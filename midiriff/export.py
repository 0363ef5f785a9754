"""Write riffs out: YAML for storage, MIDI for listening back.

The YAML layout is a single ``riff`` mapping::

	riff:
	  id: bassline
	  root_pitch: 36
	  loop_steps: 16
	  overlap_policy: clamp_to_next_onset
	  clamp_to_track_range: false
	  octave_shift: 0
	  events:
	  - {step: 0, pitch: 36, duration_steps: 2, velocity01: 0.787}
"""

import io
import logging
import os
import typing

import mido
import yaml

import midiriff.constants
import midiriff.riff

logger = logging.getLogger(__name__)


RIFF_FILE_EXTENSION = ".yaml"


# ---------------------------------------------------------------------------
# YAML
# ---------------------------------------------------------------------------

def riff_to_dict (riff: midiriff.riff.Riff) -> typing.Dict[str, typing.Any]:

	"""Plain-data form of a riff, suitable for ``yaml.safe_dump``."""

	return {
		"id": riff.id,
		"root_pitch": riff.root_pitch,
		"loop_steps": riff.loop_steps,
		"overlap_policy": riff.overlap_policy.value,
		"clamp_to_track_range": riff.clamp_to_track_range,
		"octave_shift": riff.octave_shift,
		"events": [
			{
				"step": note.step,
				"pitch": note.pitch,
				"duration_steps": note.duration_steps,
				"velocity01": round(note.velocity01, 6),
			}
			for note in riff.events
		],
	}


def riff_from_dict (values: typing.Mapping[str, typing.Any]) -> midiriff.riff.Riff:

	"""Inverse of ``riff_to_dict``."""

	events = [
		midiriff.riff.QuantizedNote(
			step = int(e["step"]),
			pitch = int(e["pitch"]),
			duration_steps = int(e["duration_steps"]),
			velocity01 = float(e["velocity01"])
		)
		for e in values.get("events") or []
	]

	return midiriff.riff.Riff(
		id = str(values["id"]),
		root_pitch = int(values["root_pitch"]),
		loop_steps = int(values.get("loop_steps", midiriff.constants.RIFF_LOOP_STEPS)),
		events = tuple(events),
		overlap_policy = midiriff.riff.OverlapPolicy(values.get("overlap_policy", midiriff.riff.OverlapPolicy.ALLOW_OVERLAP.value)),
		clamp_to_track_range = bool(values.get("clamp_to_track_range", False)),
		octave_shift = int(values.get("octave_shift", 0))
	)


def unique_path (directory: str, name: str, extension: str = RIFF_FILE_EXTENSION) -> str:

	"""
	Return ``directory/name.ext``, or ``name 1.ext``, ``name 2.ext``… if taken.
	"""

	candidate = os.path.join(directory, f"{name}{extension}")
	counter = 1

	while os.path.exists(candidate):
		candidate = os.path.join(directory, f"{name} {counter}{extension}")
		counter += 1

	return candidate


def save_riff (riff: midiriff.riff.Riff, directory: str = ".") -> str:

	"""
	Write the riff as YAML next to its siblings without overwriting any of them.

	Returns the path written.
	"""

	path = unique_path(directory, riff.id)

	with open(path, "w") as f:
		yaml.safe_dump({"riff": riff_to_dict(riff)}, f, sort_keys=False)

	logger.info(f"Created {path} events={len(riff.events)}")

	return path


def load_riff (path: str) -> midiriff.riff.Riff:

	"""Read a riff written by ``save_riff``."""

	with open(path, "r") as f:
		document = yaml.safe_load(f) or {}

	if "riff" not in document:
		raise ValueError(f"No riff found in {path}")

	return riff_from_dict(document["riff"])


# ---------------------------------------------------------------------------
# MIDI
# ---------------------------------------------------------------------------

def riff_to_midi (
	riff: midiriff.riff.Riff,
	ticks_per_quarter: int = midiriff.constants.DEFAULT_TICKS_PER_QUARTER,
	steps_per_beat: int = 4,
	channel: int = 0,
	bpm: typing.Optional[float] = None,
	loops: int = 1,
) -> mido.MidiFile:

	"""
	Render the riff as a single-track MIDI file for auditioning.

	Parameters:
		riff: The riff to render.
		ticks_per_quarter: Resolution of the written file.
		steps_per_beat: Steps per quarter note (4 = sixteenth-note steps).
		channel: MIDI channel for every note.
		bpm: Optional tempo meta event.
		loops: How many times to repeat the bar.
	"""

	if steps_per_beat <= 0 or ticks_per_quarter <= 0:
		raise ValueError("steps_per_beat and ticks_per_quarter must be positive")

	if loops < 1:
		raise ValueError("loops must be at least 1")

	ticks_per_step = ticks_per_quarter / steps_per_beat
	loop_ticks = int(round(riff.loop_steps * ticks_per_step))

	# (tick, order, message): note-offs sort before note-ons on the same tick.
	timed: typing.List[typing.Tuple[int, int, mido.Message]] = []

	for loop in range(loops):

		offset = loop * loop_ticks

		for note in riff.events:
			velocity = max(1, min(int(round(note.velocity01 * midiriff.constants.MAX_VELOCITY)), midiriff.constants.MAX_VELOCITY))
			on_tick = offset + int(round(note.step * ticks_per_step))
			off_tick = offset + int(round((note.step + note.duration_steps) * ticks_per_step))

			timed.append((on_tick, 1, mido.Message('note_on', channel=channel, note=note.pitch, velocity=velocity)))
			timed.append((off_tick, 0, mido.Message('note_off', channel=channel, note=note.pitch, velocity=0)))

	timed.sort(key=lambda x: (x[0], x[1]))

	mid = mido.MidiFile(type=0)
	mid.ticks_per_beat = ticks_per_quarter
	track = mido.MidiTrack()
	mid.tracks.append(track)

	track.append(mido.MetaMessage('track_name', name=riff.id, time=0))

	if bpm is not None:
		track.append(mido.MetaMessage('set_tempo', tempo=mido.bpm2tempo(bpm), time=0))

	last_tick = 0

	for tick, _, message in timed:
		track.append(message.copy(time=tick - last_tick))
		last_tick = tick

	track.append(mido.MetaMessage('end_of_track', time=max(0, loops * loop_ticks - last_tick)))

	return mid


def riff_to_midi_bytes (riff: midiriff.riff.Riff, **kwargs: typing.Any) -> bytes:

	"""``riff_to_midi`` serialised to SMF bytes."""

	buffer = io.BytesIO()
	riff_to_midi(riff, **kwargs).save(file=buffer)
	return buffer.getvalue()


def save_riff_midi (riff: midiriff.riff.Riff, filename: str, **kwargs: typing.Any) -> None:

	"""Write an audition MIDI file for the riff."""

	mid = riff_to_midi(riff, **kwargs)
	mid.save(filename)
	logger.info(f"Saved {filename}")
