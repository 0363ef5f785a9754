import io
import logging

import mido

import midiriff
import midiriff.display

logging.basicConfig(level=logging.INFO)

DRUM_CHANNEL = 9
TICKS_PER_BEAT = 480
SIXTEENTH = TICKS_PER_BEAT // 4

KICK = 36
SNARE = 38
HAT = 42

# Two bars of a played-in groove with loose timing and a flam on the second snare.
hits = [
	(0, KICK, 110), (6 * SIXTEENTH + 7, KICK, 90), (8 * SIXTEENTH - 4, KICK, 105),
	(4 * SIXTEENTH + 3, SNARE, 100), (12 * SIXTEENTH, SNARE, 104), (12 * SIXTEENTH + 9, SNARE, 60),
] + [(i * 2 * SIXTEENTH + (5 if i % 2 else 0), HAT, 70 if i % 2 else 85) for i in range(16)]

events = []
for tick, note, velocity in hits:
	events.append((tick, mido.Message('note_on', channel=DRUM_CHANNEL, note=note, velocity=velocity)))
	events.append((tick + SIXTEENTH // 2, mido.Message('note_off', channel=DRUM_CHANNEL, note=note, velocity=0)))

events.sort(key=lambda e: e[0])

mid = mido.MidiFile(type=0, ticks_per_beat=TICKS_PER_BEAT)
track = mido.MidiTrack()
mid.tracks.append(track)

last = 0
for tick, message in events:
	track.append(message.copy(time=tick - last))
	last = tick

buffer = io.BytesIO()
mid.save(file=buffer)

diagnostics = midiriff.ImportDiagnostics()

# Clamp keeps bar one and drops bar two; wrap folds bar two on top of it.
for policy in (midiriff.BoundaryPolicy.CLAMP, midiriff.BoundaryPolicy.WRAP):

	settings = midiriff.ImportSettings(
		riff_id = f"groove_{policy.value}",
		root_pitch = KICK,
		channel_filter = DRUM_CHANNEL,
		boundary_policy = policy,
		clamp_duration_to_next_onset = False
	)

	riff = midiriff.import_riff(buffer.getvalue(), settings, diagnostics)

	print("\n".join(midiriff.display.render_grid(riff)))
	print()

logging.info(f"Dropped past the bar: {diagnostics.out_of_window_onsets}")
