import dataclasses
import enum
import typing

import midiriff.constants


class OverlapPolicy (enum.Enum):

	"""How a riff's consecutive notes of one pitch relate in time."""

	ALLOW_OVERLAP = "allow_overlap"
	CLAMP_TO_NEXT_ONSET = "clamp_to_next_onset"


@dataclasses.dataclass
class QuantizedNote:

	"""
	One note on the step grid.

	``step`` is the local step inside the bar, ``duration_steps`` is at least
	one step and never more than a bar, ``velocity01`` is normalised to 0..1.
	"""

	step: int
	pitch: int
	duration_steps: int
	velocity01: float


@dataclasses.dataclass(frozen=True)
class Riff:

	"""
	An imported one-bar pattern, ready to hand to whatever stores or plays it.

	Parameters:
		id: Opaque label chosen by the caller.
		root_pitch: The pitch the riff was authored against (0-127).
		loop_steps: Length of the loop in steps.
		events: Notes sorted by (step, pitch).
		overlap_policy: Whether same-pitch notes were clamped to the next onset.
		clamp_to_track_range: Playback hint; fold transposed notes into the
			playing track's range.
		octave_shift: Playback hint; octaves added after transposition.
	"""

	id: str
	root_pitch: int
	loop_steps: int = midiriff.constants.RIFF_LOOP_STEPS
	events: typing.Tuple[QuantizedNote, ...] = ()
	overlap_policy: OverlapPolicy = OverlapPolicy.ALLOW_OVERLAP
	clamp_to_track_range: bool = False
	octave_shift: int = 0

	def __post_init__ (self) -> None:

		if not 0 <= self.root_pitch < midiriff.constants.MIDI_PITCHES:
			raise ValueError(f"root_pitch must be 0-127, got {self.root_pitch}")

		if self.loop_steps <= 0:
			raise ValueError("loop_steps must be positive")

		# Own copies of the notes, in grid order.
		ordered = sorted(self.events, key=lambda n: (n.step, n.pitch))
		object.__setattr__(self, "events", tuple(dataclasses.replace(n) for n in ordered))

	def __len__ (self) -> int:

		return len(self.events)

	def pitches (self) -> typing.List[int]:

		"""Distinct pitches used, lowest first."""

		return sorted({note.pitch for note in self.events})
