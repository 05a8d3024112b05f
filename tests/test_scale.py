import pytest

import cantus.scale


def test_note_of_symbols_and_integers (scale: cantus.scale.Scale) -> None:

	"""Roman grade symbols, integers and integer strings all resolve."""

	assert scale.note_of("I") == 0
	assert scale.note_of("V") == 4
	assert scale.note_of(3) == 3
	assert scale.note_of("-2") == -2


def test_note_of_rejects_unknown (scale: cantus.scale.Scale) -> None:

	"""Unknown symbols and booleans are not grades."""

	with pytest.raises(ValueError):
		scale.note_of("Q")

	with pytest.raises(ValueError):
		scale.note_of(True)


def test_pitch_of_wraps_octaves (scale: cantus.scale.Scale) -> None:

	"""Grades beyond the scale length move by whole octaves in both directions."""

	assert scale.pitch_of(0) == 60
	assert scale.pitch_of(2) == 64
	assert scale.pitch_of(7) == 72
	assert scale.pitch_of(-1) == 59
	assert scale.pitch_of(2, octave=1) == 76


def test_scale_key_and_mode () -> None:

	"""The key moves the tonic; the mode picks the intervals."""

	dorian = cantus.scale.Scale("D", "dorian")

	assert dorian.pitch_of(0) == 62
	assert dorian.pitch_of(2) == 65
	assert cantus.scale.Scale("A", "minor_pentatonic").number_of_grades == 5


def test_scale_rejects_unknown_key_or_mode () -> None:

	"""Bad names fail at construction."""

	with pytest.raises(ValueError):
		cantus.scale.Scale("H", "major")

	with pytest.raises(ValueError):
		cantus.scale.Scale("C", "bebop")


def test_normalize_folds_alterations_onto_degrees (scale: cantus.scale.Scale) -> None:

	"""An altered grade landing on a degree becomes that degree; others keep their sharps."""

	assert scale.normalize(2, 1) == (3, 0)
	assert scale.normalize(3, -1) == (2, 0)
	assert scale.normalize(6, 1) == (7, 0)
	assert scale.normalize(0, -1) == (-1, 0)
	assert scale.normalize(0, 2) == (1, 0)
	assert scale.normalize(0, 1) == (0, 1)
	assert scale.normalize(-2, 1) == (-2, 1)
	assert scale.normalize(4, 0) == (4, 0)
