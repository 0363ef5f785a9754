import dataclasses


@dataclasses.dataclass
class ImportDiagnostics:

	"""
	Counters for anomalies the importer recovered from.

	None of these change whether an import succeeds.  Pass an instance to
	``midiriff.importer.import_riff`` to find out what was silently dropped.
	"""

	format: int = 0
	track_count: int = 0
	ticks_per_quarter: int = 0

	orphan_releases: int = 0			# note-offs with no pending note-on
	dangling_onsets: int = 0			# note-ons never released before track end
	running_status_errors: int = 0		# data byte with no prior status, one byte discarded
	unknown_status_bytes: int = 0		# unsupported status, one byte skipped
	track_length_mismatches: int = 0	# events did not end on the declared chunk boundary
	filtered_channel_events: int = 0	# raw events rejected by the channel filter
	out_of_window_onsets: int = 0		# onsets past the end of the bar under clamp

	def has_anomalies (self) -> bool:

		"""True if any recoverable anomaly was seen."""

		return any((
			self.orphan_releases,
			self.dangling_onsets,
			self.running_status_errors,
			self.unknown_status_bytes,
			self.track_length_mismatches,
		))
