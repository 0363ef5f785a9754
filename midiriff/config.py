"""Import settings from YAML.

A settings file holds an ``import`` section whose keys mirror
``ImportSettings``::

	import:
	  riff_id: bassline
	  root_pitch: 36
	  steps_per_bar: 16
	  beats_per_bar: 4
	  channel_filter: any        # or 0-15
	  boundary_policy: clamp     # or wrap
	  clamp_duration_to_next_onset: true
	  dedupe_same_step_same_pitch: true
	  verbose: false
"""

import dataclasses
import logging
import os
import typing

import yaml

import midiriff.importer
import midiriff.quantizer

logger = logging.getLogger(__name__)


_ANY_CHANNEL = "any"


def settings_from_dict (values: typing.Mapping[str, typing.Any]) -> midiriff.importer.ImportSettings:

	"""
	Build ``ImportSettings`` from a plain mapping.

	Unknown keys raise ``ValueError`` so typos do not silently fall back to a
	default.
	"""

	known = {field.name for field in dataclasses.fields(midiriff.importer.ImportSettings)}
	unknown = sorted(set(values) - known)

	if unknown:
		raise ValueError(f"Unknown import settings: {', '.join(unknown)}")

	kwargs = dict(values)

	if "channel_filter" in kwargs:
		channel = kwargs["channel_filter"]
		if channel is None or (isinstance(channel, str) and channel.lower() == _ANY_CHANNEL):
			kwargs["channel_filter"] = None
		else:
			kwargs["channel_filter"] = int(channel)

	if "boundary_policy" in kwargs and not isinstance(kwargs["boundary_policy"], midiriff.quantizer.BoundaryPolicy):
		try:
			kwargs["boundary_policy"] = midiriff.quantizer.BoundaryPolicy(str(kwargs["boundary_policy"]).lower())
		except ValueError:
			raise ValueError(f"boundary_policy must be 'clamp' or 'wrap', got {kwargs['boundary_policy']!r}") from None

	if "riff_id" in kwargs:
		kwargs["riff_id"] = str(kwargs["riff_id"])

	return midiriff.importer.ImportSettings(**kwargs)


def load_settings (config_path: str = "midiriff.yaml") -> midiriff.importer.ImportSettings:

	"""
	Load import settings from a YAML file, falling back to defaults if it is missing.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return midiriff.importer.ImportSettings()

	with open(config_path, "r") as f:
		config = yaml.safe_load(f) or {}

	if not isinstance(config, dict):
		raise ValueError(f"{config_path} must contain a mapping")

	section = config.get("import") or {}

	if not isinstance(section, dict):
		raise ValueError(f"The 'import' section of {config_path} must be a mapping")

	return settings_from_dict(section)
