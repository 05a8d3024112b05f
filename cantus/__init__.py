"""
cantus - differential musical decoding onto an exact rational timeline.

Musical material is often written relative to what came before: one step up,
twice as long, a little louder. cantus decodes those relative instructions
into absolute Grade / Duration / Velocity states, stores the states in a
sparse score keyed by exact Fractions, and projects the score onto a
sequencer for playback.

What it covers:

- **Differential decoding.** ``GDVDecoder`` keeps a running state and folds
  each command into it: absolute, relative (``delta``) and multiplicative
  (``factor``) changes per field. Events pass through without disturbing the
  running state.
- **Subcontexts.** ``decoder.subcontext()`` forks an independent decoder for
  a parallel voice or an ornament; the parent's state is never affected.
- **Ornaments.** Nested modifier commands (an appoggiatura) are resolved to
  absolute states, and a ``Transcriptor`` can expand mordents, turns and
  staccato.
- **Exact time.** Every position and duration is a ``fractions.Fraction``, so
  tuplets and polyrhythms never drift.
- **Score store.** Point insertion, identity-stable slots, grouped/sorted
  queries, and half-open interval overlap queries.
- **Playback.** ``play()`` (absolute) and ``render()`` (relative) walk nested
  scores and schedule every entry onto a sequencer.

Minimal example:

    ```python
    import cantus

    decoder = cantus.GDVDecoder(cantus.Scale("C", "major"))
    score = cantus.Score()

    time = 1
    for state in cantus.neumas.decode_all(decoder, "0 +2 +2.1/2.f -1"):
        score.at(time, state)
        time += state.duration

    sequencer = cantus.TicklessSequencer()
    cantus.playback.render(score, sequencer, lambda state: print(sequencer.position, state))
    sequencer.run()
    ```

Package-level exports: ``GDVDecoder``, ``Score``, ``Scale``,
``TicklessSequencer``, ``Transcriptor``.
"""

import cantus.decoder
import cantus.neumas
import cantus.playback
import cantus.scale
import cantus.score
import cantus.sequencer
import cantus.transcription


GDVDecoder = cantus.decoder.GDVDecoder
Score = cantus.score.Score
Scale = cantus.scale.Scale
TicklessSequencer = cantus.sequencer.TicklessSequencer
Transcriptor = cantus.transcription.Transcriptor
