"""Fold tick-space notes onto a one-bar step grid.

With 480 ticks per quarter, 16 steps and 4 beats per bar a step is a
sixteenth note (120 ticks).  Positions are rounded to the nearest step with
Python's ``round``, so exact half-step positions go to the even step.
"""

import enum
import logging
import typing

import midiriff.constants
import midiriff.note_pairing
import midiriff.riff

logger = logging.getLogger(__name__)


class BoundaryPolicy (enum.Enum):

	"""What happens to a step index that falls outside the bar."""

	CLAMP = "clamp"
	WRAP = "wrap"


class Quantizer:

	"""
	Maps tick positions and lengths to step indices and step counts.

	``steps_per_bar`` must be divisible by ``beats_per_bar``.  That is checked
	by ``ImportSettings``, not here.

	Example::

		q = Quantizer(ticks_per_quarter=480, steps_per_bar=16, beats_per_bar=4)
		q.step_for_tick(240)       # 2
		q.duration_steps(240)      # 2
	"""

	def __init__ (
		self,
		ticks_per_quarter: int,
		steps_per_bar: int = midiriff.constants.DEFAULT_STEPS_PER_BAR,
		beats_per_bar: int = midiriff.constants.DEFAULT_BEATS_PER_BAR,
		boundary_policy: BoundaryPolicy = BoundaryPolicy.CLAMP,
	) -> None:

		self.ticks_per_quarter = ticks_per_quarter
		self.steps_per_bar = steps_per_bar
		self.beats_per_bar = beats_per_bar
		self.boundary_policy = boundary_policy

		self.steps_per_beat = steps_per_bar // beats_per_bar
		self.ticks_per_step = ticks_per_quarter / self.steps_per_beat

		# Onsets past the last half step belong to the next bar.
		self.last_onset_tick = int(self.ticks_per_step * (steps_per_bar - 0.5))

	def step_for_tick (self, tick: int) -> int:

		"""Nearest step index, kept inside the bar by the boundary policy."""

		step = round(tick / self.ticks_per_step)

		if self.boundary_policy == BoundaryPolicy.CLAMP:
			return max(0, min(step, self.steps_per_bar - 1))

		return step % self.steps_per_bar

	def is_out_of_window (self, onset_tick: int) -> bool:

		"""True when a clamped import should drop a note starting at ``onset_tick``."""

		return self.boundary_policy == BoundaryPolicy.CLAMP and onset_tick > self.last_onset_tick

	def duration_steps (self, duration_ticks: int) -> int:

		"""Length in steps, at least one and at most a full bar."""

		steps = round(duration_ticks / self.ticks_per_step)
		return max(1, min(steps, self.steps_per_bar))

	@staticmethod
	def velocity01 (velocity: int) -> float:

		"""Rescale a MIDI velocity to 0.0-1.0."""

		return max(0.0, min(velocity / midiriff.constants.MAX_VELOCITY, 1.0))

	def quantize (self, note: midiriff.note_pairing.PairedNote) -> typing.Optional[midiriff.riff.QuantizedNote]:

		"""
		Place one note on the grid, or return ``None`` if it falls after the bar.
		"""

		if self.is_out_of_window(note.onset_tick):
			logger.debug(f"Dropping pitch={note.pitch} onset={note.onset_tick}: past the end of the bar")
			return None

		return midiriff.riff.QuantizedNote(
			step = self.step_for_tick(note.onset_tick),
			pitch = note.pitch,
			duration_steps = self.duration_steps(note.duration_ticks),
			velocity01 = self.velocity01(note.velocity)
		)
