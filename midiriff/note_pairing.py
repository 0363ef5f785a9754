"""Note-on / note-off pairing.

Pending onsets are kept in one last-in-first-out stack per (channel, pitch).
When the same pitch is struck again before it has been released (drum rolls,
legato overlaps) the most recently struck instance closes first.
"""

import dataclasses
import logging
import typing

import midiriff.constants

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class RawTimedEvent:

	"""
	A note boundary at an absolute tick, as emitted by the SMF parser.

	Onsets carry the struck velocity; releases carry velocity 0.
	"""

	tick: int
	pitch: int
	velocity: int
	channel: int
	is_onset: bool


@dataclasses.dataclass(frozen=True)
class PairedNote:

	"""
	A note with a known length, in tick space.
	"""

	onset_tick: int
	duration_ticks: int
	pitch: int
	velocity: int
	channel: int


def note_key (channel: int, pitch: int) -> int:

	"""Compact integer key for a (channel, pitch) pair."""

	return channel * midiriff.constants.MIDI_PITCHES + pitch


class NotePairer:

	"""
	Matches releases to pending onsets per (channel, pitch).

	A release pops at most one pending onset.  A release with nothing pending
	is an orphan and is discarded.  Onsets that are never released stay
	pending until ``clear()`` drops them.
	"""

	def __init__ (self) -> None:

		self._active: typing.Dict[int, typing.List[typing.Tuple[int, int]]] = {}
		self.orphan_releases = 0

	@property
	def pending_count (self) -> int:

		"""Number of onsets still waiting for a release."""

		return sum(len(stack) for stack in self._active.values())

	def note_on (self, tick: int, channel: int, pitch: int, velocity: int) -> None:

		"""Push a pending onset."""

		self._active.setdefault(note_key(channel, pitch), []).append((tick, velocity))

	def note_off (self, tick: int, channel: int, pitch: int) -> typing.Optional[PairedNote]:

		"""
		Close the most recent pending onset for this key.

		Returns the resulting note, or ``None`` if the release was an orphan.
		A zero or negative length is floored to one tick.
		"""

		stack = self._active.get(note_key(channel, pitch))

		if not stack:
			self.orphan_releases += 1
			logger.debug(f"Orphan note-off ch={channel} pitch={pitch} tick={tick}")
			return None

		onset_tick, velocity = stack.pop()

		return PairedNote(
			onset_tick = onset_tick,
			duration_ticks = max(1, tick - onset_tick),
			pitch = pitch,
			velocity = velocity,
			channel = channel
		)

	def clear (self) -> int:

		"""Drop every pending onset and return how many were dropped."""

		dropped = self.pending_count
		self._active.clear()
		return dropped


def pair_notes (
	events: typing.Iterable[RawTimedEvent],
	channel_filter: typing.Optional[int] = None,
) -> typing.List[PairedNote]:

	"""
	Replay a chronological event stream and return notes in release order.

	Parameters:
		events: Raw events sorted by tick.
		channel_filter: Only pair events on this channel (``None`` = any).
	"""

	pairer = NotePairer()
	notes: typing.List[PairedNote] = []

	for event in events:

		if channel_filter is not None and event.channel != channel_filter:
			continue

		if event.is_onset:
			pairer.note_on(event.tick, event.channel, event.pitch, event.velocity)
			continue

		note = pairer.note_off(event.tick, event.channel, event.pitch)

		if note is not None:
			notes.append(note)

	return notes
