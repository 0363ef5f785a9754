"""SMF and riff constants.

Status bytes follow the Standard MIDI File 1.0 layout.  ``RIFF_LOOP_STEPS`` is
the length of every imported riff: the importer always produces one 16-step
bar, whatever grid was used to quantize it.
"""

# Chunk tags

HEADER_CHUNK_ID = "MThd"
TRACK_CHUNK_ID = "MTrk"

MIN_HEADER_LENGTH = 6
MIN_FILE_LENGTH = 14			# 8 byte chunk prefix + 6 byte header body

# Division

SMPTE_DIVISION_FLAG = 0x8000
DEFAULT_TICKS_PER_QUARTER = 480

# Status bytes

STATUS_META = 0xFF
STATUS_SYSEX = 0xF0
STATUS_SYSEX_ESCAPE = 0xF7

NOTE_OFF = 0x80
NOTE_ON = 0x90
POLY_AFTERTOUCH = 0xA0
CONTROL_CHANGE = 0xB0
PROGRAM_CHANGE = 0xC0
CHANNEL_PRESSURE = 0xD0
PITCH_BEND = 0xE0

# Data bytes that follow each skipped channel voice message

SKIPPED_DATA_LENGTHS = {
	POLY_AFTERTOUCH: 2,
	CONTROL_CHANGE: 2,
	PITCH_BEND: 2,
	PROGRAM_CHANGE: 1,
	CHANNEL_PRESSURE: 1,
}

# Ranges

MIDI_CHANNELS = 16
MIDI_PITCHES = 128
MAX_VELOCITY = 127

# Riff defaults

RIFF_LOOP_STEPS = 16
DEFAULT_STEPS_PER_BAR = 16
DEFAULT_BEATS_PER_BAR = 4
DEFAULT_ROOT_PITCH = 60			# C4
DEFAULT_RIFF_ID = "riff"
