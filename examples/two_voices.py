import logging

import mido

import cantus
import cantus.constants.durations as dur
import cantus.datasets
import cantus.gdv
import cantus.neumas
import cantus.playback
import cantus.transcription

logging.basicConfig(level=logging.INFO)

TICKS_PER_BEAT = 480
TICKS_PER_BAR = TICKS_PER_BEAT * 4

scale = cantus.Scale("D", "dorian")
transcriptor = cantus.Transcriptor(cantus.transcription.default_features())
decoder = cantus.GDVDecoder(scale, base_duration=dur.QUARTER, transcriptor=transcriptor)


def phrase_score (decoder, text):

	score = cantus.Score()
	time = score.resolution

	for result in cantus.neumas.decode_all(decoder, text):
		for state in (result if isinstance(result, list) else [result]):
			score.at(time, state)
			time += state.duration

	return score


# The melody and the bass start from the same state but move independently.
decoder.decode("4.1/4.mf")
bass = decoder.subcontext()

melody = phrase_score(decoder, "0 +1 +1.1/2.f -2 +1#.1/8 +1 silence.1/4 -3.1/2.mp")
bass_line = phrase_score(bass, "-7.1/2.p +3 -1.1 !end")

song = cantus.Score()
song.at(1, melody)
song.at(1, bass_line)

sequencer = cantus.TicklessSequencer()
events = []


def collect (state):

	message = cantus.gdv.to_midi_note_on_or_event(state, scale)

	if message is None:
		return

	if isinstance(state, cantus.datasets.GDV):
		length = state.note_duration or state.duration
		events.append((sequencer.position, message))
		events.append((sequencer.position + length, mido.Message("note_off", channel=message.channel, note=message.note)))
	else:
		logging.info(f"{sequencer.position}: event {message!r}")


cantus.playback.play(song, sequencer, collect)
sequencer.run()

track = mido.MidiTrack()
last_tick = 0

for position, message in sorted(events, key=lambda pair: (pair[0], pair[1].type != "note_off")):
	tick = int(position * TICKS_PER_BAR)
	track.append(message.copy(time=tick - last_tick))
	last_tick = tick

midi_file = mido.MidiFile(ticks_per_beat=TICKS_PER_BEAT)
midi_file.tracks.append(track)
midi_file.save("two_voices.mid")

logging.info(f"Wrote {len(track)} messages to two_voices.mid")
