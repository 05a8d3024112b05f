import fractions
import logging
import pathlib

import pytest

import cantus.__main__


def test_build_score_lays_states_end_to_end () -> None:

	"""Decoded states follow one another from the score's first position."""

	decoder = cantus.__main__.build_decoder({})

	score = cantus.__main__.build_score(decoder, "0 +2.1/2 #rest !cue -1")

	assert score.times() == [1, fractions.Fraction(5, 4), fractions.Fraction(7, 4)]
	assert [dataset.grade for dataset in score[fractions.Fraction(7, 4)] if not dataset.is_event] == [1]
	assert score[fractions.Fraction(7, 4)][0].event == "cue"


def test_build_score_with_zero_resolution () -> None:

	"""With resolution 0 the first state sits at time 0."""

	decoder = cantus.__main__.build_decoder({})

	score = cantus.__main__.build_score(decoder, "0.1/2 +1", resolution=0)

	assert score.times() == [0, fractions.Fraction(1, 2)]
	assert score.finish() == 1


def test_build_decoder_reads_config () -> None:

	"""Scale and base duration come from the config sections."""

	decoder = cantus.__main__.build_decoder({"scale": {"key": "D", "mode": "dorian"}, "decoder": {"base_duration": "1/8"}})

	assert decoder.scale.pitch_of(0) == 62
	assert decoder.last.duration == fractions.Fraction(1, 8)


def test_main_with_yaml_config (tmp_path: pathlib.Path, capsys: pytest.CaptureFixture) -> None:

	"""A YAML config drives the phrase and --dump prints the score."""

	config = tmp_path / "config.yaml"
	config.write_text("scale:\n  key: G\nphrase: \"0 +1.1/2\"\n")

	assert cantus.__main__.main([str(config), "--dump"]) == 0

	output = capsys.readouterr().out

	assert "time: 1/1" in output
	assert "time: 5/4" in output


def test_main_without_config_uses_defaults (tmp_path: pathlib.Path, caplog: pytest.LogCaptureFixture) -> None:

	"""A missing config file falls back to defaults with a warning."""

	with caplog.at_level(logging.INFO, logger="cantus.__main__"):
		assert cantus.__main__.main([str(tmp_path / "missing.yaml"), "--phrase", "0 +1"]) == 0

	assert "not found" in caplog.text
	assert "note_on" in caplog.text


def test_main_reports_bad_phrase (tmp_path: pathlib.Path) -> None:

	"""Undecodable phrases return a failure status."""

	assert cantus.__main__.main([str(tmp_path / "missing.yaml"), "--phrase", "0 +x"]) == 1
