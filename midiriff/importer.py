"""MIDI file to riff import pipeline.

bytes → ``smf_parser`` (tick-sorted note events) → ``note_pairing`` (notes
with durations) → ``quantizer`` (notes on the step grid) → ``collisions``
(optional clean-up) → ``Riff``.

The whole pipeline runs synchronously and either returns a complete riff or
raises.  Recoverable anomalies never raise; pass an ``ImportDiagnostics`` to
see them.

Example::

	settings = ImportSettings(riff_id="bassline", root_pitch=36, channel_filter=1)
	riff = import_riff_file("bassline.mid", settings)
"""

import dataclasses
import logging
import os
import typing

import midiriff.collisions
import midiriff.constants
import midiriff.diagnostics
import midiriff.note_pairing
import midiriff.quantizer
import midiriff.riff
import midiriff.smf_parser

logger = logging.getLogger(__name__)


MIDI_FILE_EXTENSIONS = (".mid", ".midi")


@dataclasses.dataclass
class ImportSettings:

	"""
	Caller-chosen options for one import.

	Parameters:
		riff_id: Label copied into the riff unchanged.
		root_pitch: Authored root (0-127), copied into the riff unchanged.
		steps_per_bar: Grid resolution; must be divisible by ``beats_per_bar``.
		beats_per_bar: Beats in the bar being imported.
		channel_filter: Only import this MIDI channel (0-15), or ``None`` for any.
		boundary_policy: ``CLAMP`` keeps notes in the first bar and drops later
			onsets; ``WRAP`` folds every bar onto the first.
		clamp_duration_to_next_onset: Stop each note at the next onset of its
			pitch.
		dedupe_same_step_same_pitch: Keep only the loudest of notes sharing a
			step and pitch.
		verbose: Log every imported note at INFO instead of DEBUG.
	"""

	riff_id: str = midiriff.constants.DEFAULT_RIFF_ID
	root_pitch: int = midiriff.constants.DEFAULT_ROOT_PITCH
	steps_per_bar: int = midiriff.constants.DEFAULT_STEPS_PER_BAR
	beats_per_bar: int = midiriff.constants.DEFAULT_BEATS_PER_BAR
	channel_filter: typing.Optional[int] = None
	boundary_policy: midiriff.quantizer.BoundaryPolicy = midiriff.quantizer.BoundaryPolicy.CLAMP
	clamp_duration_to_next_onset: bool = True
	dedupe_same_step_same_pitch: bool = True
	verbose: bool = False

	def __post_init__ (self) -> None:

		self.validate()

	def validate (self) -> None:

		"""Raise ``ValueError`` if the settings cannot produce a riff."""

		if self.steps_per_bar <= 0 or self.beats_per_bar <= 0:
			raise ValueError("steps_per_bar and beats_per_bar must be positive")

		if self.steps_per_bar % self.beats_per_bar != 0:
			raise ValueError(f"steps_per_bar ({self.steps_per_bar}) must be divisible by beats_per_bar ({self.beats_per_bar}), e.g. 16/4")

		if not 0 <= self.root_pitch < midiriff.constants.MIDI_PITCHES:
			raise ValueError(f"root_pitch must be 0-127, got {self.root_pitch}")

		if self.channel_filter is not None and not 0 <= self.channel_filter < midiriff.constants.MIDI_CHANNELS:
			raise ValueError(f"channel_filter must be 0-15 or None, got {self.channel_filter}")

		if not isinstance(self.boundary_policy, midiriff.quantizer.BoundaryPolicy):
			raise ValueError(f"boundary_policy must be a BoundaryPolicy, got {self.boundary_policy!r}")

	@property
	def overlap_policy (self) -> midiriff.riff.OverlapPolicy:

		"""The overlap policy a riff imported with these settings will carry."""

		if self.clamp_duration_to_next_onset:
			return midiriff.riff.OverlapPolicy.CLAMP_TO_NEXT_ONSET

		return midiriff.riff.OverlapPolicy.ALLOW_OVERLAP


def quantize_notes (
	notes: typing.Iterable[midiriff.note_pairing.PairedNote],
	quantizer: midiriff.quantizer.Quantizer,
	diagnostics: midiriff.diagnostics.ImportDiagnostics,
	verbose: bool = False,
) -> typing.List[midiriff.riff.QuantizedNote]:

	"""
	Quantize paired notes, dropping those that start after the bar.
	"""

	level = logging.INFO if verbose else logging.DEBUG
	quantized: typing.List[midiriff.riff.QuantizedNote] = []

	for note in notes:

		result = quantizer.quantize(note)

		if result is None:
			diagnostics.out_of_window_onsets += 1
			continue

		logger.log(
			level,
			f"note={note.pitch} ch={note.channel} on_tick={note.onset_tick} off_tick={note.onset_tick + note.duration_ticks} "
			f"step={result.step} dur_steps={result.duration_steps} vel={note.velocity}"
		)

		quantized.append(result)

	return quantized


def import_riff (
	data: bytes,
	settings: typing.Optional[ImportSettings] = None,
	diagnostics: typing.Optional[midiriff.diagnostics.ImportDiagnostics] = None,
) -> midiriff.riff.Riff:

	"""
	Convert the bytes of a Standard MIDI File into a one-bar riff.

	Parameters:
		data: Raw file contents.
		settings: Import options (defaults: 16 steps, 4 beats, any channel,
			clamp, both clean-up passes on).
		diagnostics: Optional counters filled in with what was dropped.

	Raises:
		ValueError: The settings are inconsistent.  Checked before parsing.
		midiriff.errors.SmfError: The file cannot be read.
	"""

	if settings is None:
		settings = ImportSettings()

	settings.validate()

	if diagnostics is None:
		diagnostics = midiriff.diagnostics.ImportDiagnostics()

	smf = midiriff.smf_parser.parse_smf(data, diagnostics)

	if settings.channel_filter is not None:
		diagnostics.filtered_channel_events += sum(1 for e in smf.events if e.channel != settings.channel_filter)

	paired = midiriff.note_pairing.pair_notes(smf.events, channel_filter=settings.channel_filter)

	quantizer = midiriff.quantizer.Quantizer(
		ticks_per_quarter = smf.ticks_per_quarter,
		steps_per_bar = settings.steps_per_bar,
		beats_per_bar = settings.beats_per_bar,
		boundary_policy = settings.boundary_policy
	)

	notes = quantize_notes(paired, quantizer, diagnostics, verbose=settings.verbose)

	if settings.clamp_duration_to_next_onset:
		midiriff.collisions.clamp_durations_to_next_onset(notes, settings.steps_per_bar)

	if settings.dedupe_same_step_same_pitch:
		notes = midiriff.collisions.dedupe_same_step_same_pitch(notes)

	riff = midiriff.riff.Riff(
		id = settings.riff_id,
		root_pitch = settings.root_pitch,
		loop_steps = midiriff.constants.RIFF_LOOP_STEPS,
		events = tuple(notes),
		overlap_policy = settings.overlap_policy,
		clamp_to_track_range = False,
		octave_shift = 0
	)

	if diagnostics.has_anomalies():
		logger.debug(f"Recovered anomalies: {diagnostics}")

	return riff


def import_riff_file (
	path: typing.Union[str, os.PathLike],
	settings: typing.Optional[ImportSettings] = None,
	diagnostics: typing.Optional[midiriff.diagnostics.ImportDiagnostics] = None,
) -> midiriff.riff.Riff:

	"""
	Read a ``.mid`` file from disk and import it.

	Raises:
		ValueError: The path does not name a MIDI file, or the settings are
			inconsistent.
		FileNotFoundError: The file does not exist.
		midiriff.errors.SmfError: The file cannot be read.
	"""

	path = os.fspath(path)

	if not str(path).lower().endswith(MIDI_FILE_EXTENSIONS):
		raise ValueError(f"Selected file is not a .mid file: {path}")

	if settings is None:
		settings = ImportSettings()

	settings.validate()

	if diagnostics is None:
		diagnostics = midiriff.diagnostics.ImportDiagnostics()

	with open(path, "rb") as f:
		data = f.read()

	riff = import_riff(data, settings, diagnostics)

	logger.info(f"Imported {path} id={riff.id} events={len(riff.events)} tpq={diagnostics.ticks_per_quarter}")

	return riff
