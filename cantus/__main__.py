"""
Decode a neuma phrase, place it in a score and render it as MIDI note-ons.

Usage::

    python -m cantus [config.yaml] [--phrase "0 +2 +2.1/2.f -1"] [--dump]

The optional YAML file may contain::

    scale:
      key: D
      mode: dorian
      base_octave: 4
    decoder:
      base_duration: "1/4"
    score:
      resolution: 1
    midi:
      channel: 0
    phrase: "0 +2 +2.1/2.f -1 +1.+o1 -1.-o1.*1/2"
"""

import argparse
import logging
import os
import sys
import typing

import yaml

import cantus.decoder
import cantus.gdv
import cantus.neumas
import cantus.playback
import cantus.rational
import cantus.scale
import cantus.score
import cantus.sequencer
import cantus.transcription


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


DEFAULT_PHRASE = "0 +2 +2.1/2.f -1 +1.+o1 -1.-o1.*1/2"


def load_config (config_path: str = 'config.yaml') -> dict:

	"""
	Load configuration from a YAML file.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return {}

	with open(config_path, 'r') as f:
		return yaml.safe_load(f) or {}


def build_decoder (config: dict) -> cantus.decoder.GDVDecoder:

	"""
	Create a decoder from the ``scale`` and ``decoder`` config sections.
	"""

	scale_config = config.get('scale') or {}
	decoder_config = config.get('decoder') or {}

	scale = cantus.scale.Scale(
		key = scale_config.get('key', 'C'),
		mode = scale_config.get('mode', 'major'),
		base_octave = scale_config.get('base_octave', 4)
	)

	transcriptor = cantus.transcription.Transcriptor(cantus.transcription.default_features())

	return cantus.decoder.GDVDecoder(
		scale,
		base_duration = cantus.rational.rationalize(decoder_config.get('base_duration', '1/4')),
		transcriptor = transcriptor
	)


def build_score (decoder: cantus.decoder.GDVDecoder, phrase: str, resolution: cantus.rational.RationalLike = 1) -> cantus.score.Score:

	"""
	Decode ``phrase`` and lay the resulting states end to end in a new score.
	"""

	score = cantus.score.Score(resolution)
	time = score.resolution

	for result in cantus.neumas.decode_all(decoder, phrase):

		states = result if isinstance(result, list) else [result]

		for state in states:
			score.at(time, state)
			time += state.duration

	return score


def main (argv: typing.Optional[typing.List[str]] = None) -> int:

	"""
	Main entry point for the cantus command line.
	"""

	parser = argparse.ArgumentParser(prog="cantus", description="Decode a neuma phrase and render it as MIDI note-ons.")
	parser.add_argument("config", nargs="?", default="config.yaml", help="YAML configuration file")
	parser.add_argument("--phrase", help="Neuma phrase, overriding the config")
	parser.add_argument("--dump", action="store_true", help="Print the score as YAML")
	args = parser.parse_args(argv)

	config = load_config(args.config)

	phrase = args.phrase or config.get('phrase', DEFAULT_PHRASE)
	resolution = (config.get('score') or {}).get('resolution', 1)
	channel = (config.get('midi') or {}).get('channel', 0)

	try:
		decoder = build_decoder(config)
		score = build_score(decoder, phrase, resolution)

		sequencer = cantus.sequencer.TicklessSequencer()

		def emit (state: typing.Any) -> None:
			message = cantus.gdv.to_midi_note_on_or_event(state, decoder.scale, channel=channel)
			logger.info(f"{cantus.rational.format_time(sequencer.position)}: {message if message is not None else 'rest'}")

		cantus.playback.render(score, sequencer, emit)
		sequencer.run()

	except (ValueError, TypeError):
		logger.exception(f"Could not render phrase {phrase!r}")
		return 1

	if args.dump:
		print(yaml.safe_dump(score.dump(), sort_keys=False))

	logger.info(f"Rendered {len(score)} slots, finishing at {score.finish()}")

	return 0


if __name__ == "__main__":
	sys.exit(main())
