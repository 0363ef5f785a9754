"""
midiriff - turn a Standard MIDI File into a one-bar step riff.

Reads the raw bytes of a ``.mid`` file, pairs every note-on with its
note-off, quantizes the notes onto a fixed step grid (16 steps per bar by
default) and cleans up collisions.  The result is a ``Riff``: a root pitch,
a 16-step loop length, an overlap policy and a sorted list of notes, each
with a step, pitch, duration in steps and a 0-1 velocity.

What it handles:

- **Real-world files.** Format 0 and 1 files, running status, meta and
  SysEx events, note-on with velocity 0 as note-off, and tracks whose
  events disagree with their declared length.
- **Overlapping notes.** Re-struck pitches (drum rolls, legato overlaps)
  pair last-in-first-out, so the most recent strike closes first.
- **Grid folding.** ``clamp`` keeps the first bar and drops later onsets;
  ``wrap`` folds every bar onto the first.
- **Clean-up.** Optional monophonic-per-pitch duration clamping and
  same-step duplicate removal (loudest wins, longest sustain kept).
- **Diagnostics.** Orphan note-offs, dangling note-ons and skipped bytes
  never fail an import; pass an ``ImportDiagnostics`` to count them.

Not supported: SMPTE time division and tempo maps (only the file's ticks
per quarter note is used).

Minimal example:

    ```python
    import midiriff

    settings = midiriff.ImportSettings(riff_id="bassline", root_pitch=36)
    riff = midiriff.import_riff_file("bassline.mid", settings)

    for note in riff.events:
        print(note.step, note.pitch, note.duration_steps, note.velocity01)
    ```

Package-level exports: ``import_riff``, ``import_riff_file``,
``ImportSettings``, ``ImportDiagnostics``, ``Riff``, ``QuantizedNote``,
``OverlapPolicy``, ``BoundaryPolicy``, ``SmfError``.
"""

import midiriff.diagnostics
import midiriff.errors
import midiriff.importer
import midiriff.quantizer
import midiriff.riff


import_riff = midiriff.importer.import_riff
import_riff_file = midiriff.importer.import_riff_file
ImportSettings = midiriff.importer.ImportSettings
ImportDiagnostics = midiriff.diagnostics.ImportDiagnostics
Riff = midiriff.riff.Riff
QuantizedNote = midiriff.riff.QuantizedNote
OverlapPolicy = midiriff.riff.OverlapPolicy
BoundaryPolicy = midiriff.quantizer.BoundaryPolicy
SmfError = midiriff.errors.SmfError
