"""Fatal import conditions.

Everything raised from here aborts the whole import.  Recoverable anomalies
(orphan note-offs, unknown status bytes, broken running status) are never
raised; they are counted in ``ImportDiagnostics`` and logged at debug level.
"""


class SmfError (Exception):

	"""Base class for conditions that make a MIDI file unreadable."""

	pass


class InvalidHeader (SmfError):

	"""The ``MThd`` chunk is missing, truncated or declares a length below 6."""

	pass


class UnsupportedTimeDivision (SmfError):

	"""The file uses SMPTE time code instead of ticks per quarter note."""

	pass


class InvalidTrackChunk (SmfError):

	"""A declared track does not start with an ``MTrk`` tag."""

	pass


class UnexpectedEndOfData (SmfError):

	"""A fixed-width or variable-length read ran past the end of the buffer."""

	pass
