import dataclasses
import fractions
import typing

import pytest

import cantus.datasets
import cantus.decoder
import cantus.scale


class WrappingTranscriptor:

	"""Transcriptor stub that records what it is given."""

	def __init__ (self) -> None:

		self.seen: typing.List[cantus.datasets.GDV] = []


	def transcript (self, state: cantus.datasets.GDV) -> typing.List[typing.Any]:

		self.seen.append(state)
		return ["wrapped", state]


def test_default_seed_state () -> None:

	"""A bare decoder starts on grade 0, octave 0, a quarter note, mp."""

	decoder = cantus.decoder.GDVDecoder()
	last = decoder.last

	assert (last.grade, last.octave, last.duration, last.velocity) == (0, 0, fractions.Fraction(1, 4), 0)
	assert decoder.base is last


def test_base_duration_follows_explicit_base () -> None:

	"""Without a base_duration the seed state's duration is used."""

	decoder = cantus.decoder.GDVDecoder(base=cantus.datasets.GDV(duration=fractions.Fraction(1, 8)))

	assert decoder.base_duration == fractions.Fraction(1, 8)


def test_decode_persists_running_state (decoder: cantus.decoder.GDVDecoder) -> None:

	"""Each decode builds on the previous result."""

	decoder.decode("0")
	result = decoder.decode("+2.1/2.f")

	assert result.grade == 2
	assert result.duration == fractions.Fraction(1, 2)
	assert result.velocity == 1
	assert decoder.last is result

	result = decoder.decode({"delta_grade": -1})

	assert result.grade == 1
	assert result.duration == fractions.Fraction(1, 2)


def test_decoded_states_are_immutable (decoder: cantus.decoder.GDVDecoder) -> None:

	"""A state handed out by decode never changes afterwards."""

	first = decoder.decode({"abs_grade": 0})
	decoder.decode({"delta_grade": 1})

	assert first.grade == 0

	with pytest.raises(dataclasses.FrozenInstanceError):
		first.grade = 5


def test_subcontext_isolation (decoder: cantus.decoder.GDVDecoder) -> None:

	"""A forked decoder advances independently of its parent."""

	decoder.decode({"abs_grade": 2})

	fork = decoder.subcontext()
	fork.decode({"delta_grade": 1})

	assert decoder.last.grade == 2
	assert fork.last.grade == 3

	decoder.decode({"delta_grade": -2})

	assert decoder.last.grade == 0
	assert fork.last.grade == 3


def test_subcontext_shares_scale_and_transcriptor (scale: cantus.scale.Scale) -> None:

	"""The fork keeps the parent's scale and transcriptor and starts from its last state."""

	transcriptor = WrappingTranscriptor()
	decoder = cantus.decoder.GDVDecoder(scale, transcriptor=transcriptor)
	decoder.decode({"abs_grade": 4})

	fork = decoder.subcontext()

	assert fork.scale is scale
	assert fork.transcriptor is transcriptor
	assert fork.base is decoder.last


def test_event_does_not_update_running_state (decoder: cantus.decoder.GDVDecoder) -> None:

	"""Events are returned as they are and leave the running state alone."""

	decoder.decode("3.1/2")
	before = decoder.last

	result = decoder.decode({"event": "cue"})

	assert isinstance(result, cantus.datasets.Event)
	assert result.event == "cue"
	assert decoder.last is before

	with pytest.raises(ValueError):
		decoder.decode({"event": None})


def test_comment_is_skipped (decoder: cantus.decoder.GDVDecoder) -> None:

	"""Comment-only input decodes to None."""

	before = decoder.last

	assert decoder.decode({"comment": "bridge"}) is None
	assert decoder.last is before


def test_unrecognized_input_raises (decoder: cantus.decoder.GDVDecoder) -> None:

	"""Input with nothing to decode fails and leaves the running state alone."""

	before = decoder.last

	with pytest.raises(cantus.decoder.UnrecognizedCommandKeys):
		decoder.decode({"nothing": 1})

	assert decoder.last is before


def test_transcriptor_receives_non_event_results (scale: cantus.scale.Scale) -> None:

	"""The transcriptor output is returned; events skip it."""

	transcriptor = WrappingTranscriptor()
	decoder = cantus.decoder.GDVDecoder(scale, transcriptor=transcriptor)

	result = decoder.decode({"abs_grade": 1})

	assert result[0] == "wrapped"
	assert result[1] is decoder.last

	decoder.decode({"event": "cue"})

	assert transcriptor.seen == [decoder.last]


def test_modifier_decoding_does_not_touch_last (decoder: cantus.decoder.GDVDecoder) -> None:

	"""Nested modifier commands resolve against the previous state only."""

	decoder.decode({"abs_grade": 2})

	result = decoder.decode({"attributes": ["+1"], "modifiers": {"appoggiatura": {"delta_grade": 3}}})

	assert result.grade == 3
	assert result.modifiers["appoggiatura"].grade == 5
	assert decoder.last.grade == 3


def test_base_setter_resets_running_state (decoder: cantus.decoder.GDVDecoder) -> None:

	"""Assigning a new base restarts decoding from it."""

	decoder.decode({"abs_grade": 6})

	base = cantus.datasets.GDV(grade=1)
	decoder.base = base

	assert decoder.last is base
	assert decoder.decode({"delta_grade": 1}).grade == 2


def test_proto_decoder_subcontext_is_self () -> None:

	"""Stateless decoders return themselves as their subcontext."""

	proto = cantus.decoder.ProtoDecoder()

	assert proto.subcontext() is proto

	with pytest.raises(NotImplementedError):
		proto.decode("0")
