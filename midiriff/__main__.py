"""Command line importer.

	python -m midiriff groove.mid --id groove --root 48 --channel 9 --grid --save riffs/
"""

import argparse
import dataclasses
import logging
import sys
import typing

import midiriff.config
import midiriff.diagnostics
import midiriff.display
import midiriff.errors
import midiriff.export
import midiriff.importer
import midiriff.quantizer


logger = logging.getLogger(__name__)


def _channel (value: str) -> typing.Optional[int]:

	if value.lower() == "any":
		return None

	return int(value)


def build_parser () -> argparse.ArgumentParser:

	"""Command line options; anything left unset comes from the config file."""

	parser = argparse.ArgumentParser(prog="midiriff", description="Import a MIDI file as a one-bar step riff")
	parser.add_argument("midi_file", help="Standard MIDI file (.mid) to import")
	parser.add_argument("--config", help="YAML settings file (an 'import' section)")
	parser.add_argument("--id", dest="riff_id", help="Riff id (default: riff)")
	parser.add_argument("--root", dest="root_pitch", type=int, help="Authored root MIDI note (default: 60)")
	parser.add_argument("--steps", dest="steps_per_bar", type=int, help="Steps per bar (default: 16)")
	parser.add_argument("--beats", dest="beats_per_bar", type=int, help="Beats per bar (default: 4)")
	parser.add_argument("--channel", dest="channel_filter", type=_channel, default=argparse.SUPPRESS, help="MIDI channel 0-15 or 'any' (default: any)")
	parser.add_argument("--wrap", action="store_true", help="Fold every bar onto the first instead of clamping")
	parser.add_argument("--allow-overlap", action="store_true", help="Do not clamp durations to the next onset")
	parser.add_argument("--keep-duplicates", action="store_true", help="Do not dedupe notes on the same step and pitch")
	parser.add_argument("--verbose", action="store_true", help="Log every imported note")
	parser.add_argument("--debug", action="store_true", help="Log recovered parse anomalies")
	parser.add_argument("--grid", action="store_true", help="Print an ASCII grid of the riff")
	parser.add_argument("--save", metavar="DIR", help="Write the riff as YAML into DIR")
	parser.add_argument("--preview", metavar="FILE", help="Write an audition MIDI file")
	return parser


def settings_from_args (args: argparse.Namespace) -> midiriff.importer.ImportSettings:

	"""Overlay command line options on the config file's settings."""

	if args.config:
		settings = midiriff.config.load_settings(args.config)
	else:
		settings = midiriff.importer.ImportSettings()

	overrides: typing.Dict[str, typing.Any] = {}

	for name in ("riff_id", "root_pitch", "steps_per_bar", "beats_per_bar"):
		value = getattr(args, name)
		if value is not None:
			overrides[name] = value

	# "--channel any" must be able to clear a channel set in the config.
	if hasattr(args, "channel_filter"):
		overrides["channel_filter"] = args.channel_filter

	if args.wrap:
		overrides["boundary_policy"] = midiriff.quantizer.BoundaryPolicy.WRAP
	if args.allow_overlap:
		overrides["clamp_duration_to_next_onset"] = False
	if args.keep_duplicates:
		overrides["dedupe_same_step_same_pitch"] = False
	if args.verbose:
		overrides["verbose"] = True

	return dataclasses.replace(settings, **overrides)


def main (argv: typing.Optional[typing.List[str]] = None) -> int:

	"""
	Entry point for ``python -m midiriff``.  Returns the process exit code.
	"""

	parser = build_parser()
	args = parser.parse_args(argv)

	logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO)

	try:
		settings = settings_from_args(args)
	except ValueError as e:
		parser.error(str(e))

	diagnostics = midiriff.diagnostics.ImportDiagnostics()

	try:
		riff = midiriff.importer.import_riff_file(args.midi_file, settings, diagnostics)
	except (midiriff.errors.SmfError, ValueError, OSError) as e:
		logger.error(f"Import failed: {e}")
		return 1

	if diagnostics.has_anomalies() or diagnostics.out_of_window_onsets:
		logger.info(
			f"Dropped: orphan_releases={diagnostics.orphan_releases} dangling_onsets={diagnostics.dangling_onsets} "
			f"out_of_window={diagnostics.out_of_window_onsets} skipped_bytes={diagnostics.running_status_errors + diagnostics.unknown_status_bytes}"
		)

	if args.grid:
		print("\n".join(midiriff.display.render_grid(riff)))

	if args.save:
		midiriff.export.save_riff(riff, args.save)

	if args.preview:
		midiriff.export.save_riff_midi(riff, args.preview, ticks_per_quarter=diagnostics.ticks_per_quarter, steps_per_beat=settings.steps_per_bar // settings.beats_per_bar)

	return 0


if __name__ == "__main__":
	sys.exit(main())
