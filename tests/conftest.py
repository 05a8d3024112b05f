import fractions
import typing

import pytest

import cantus.decoder
import cantus.rational
import cantus.scale
import cantus.sequencer
import cantus.transcription


class RecordingSequencer:

	"""Sequencer stub that records scheduling calls without running them."""

	def __init__ (self, position: cantus.rational.RationalLike = 0) -> None:

		"""Start at a fixed position with an empty call log."""

		self.position = cantus.rational.rationalize(position)
		self.calls: typing.List[typing.Tuple[str, fractions.Fraction, typing.Callable]] = []


	def at (self, time: cantus.rational.RationalLike, callback: typing.Callable) -> None:

		"""Record an absolute scheduling call."""

		self.calls.append(("at", cantus.rational.rationalize(time), callback))


	def wait (self, duration: cantus.rational.RationalLike, callback: typing.Callable) -> None:

		"""Record a relative scheduling call."""

		self.calls.append(("wait", cantus.rational.rationalize(duration), callback))


	def times (self, kind: str) -> typing.List[fractions.Fraction]:

		"""Positions (or waits) of the recorded calls of one kind, in call order."""

		return [time for call_kind, time, _ in self.calls if call_kind == kind]


@pytest.fixture
def scale () -> cantus.scale.Scale:

	"""C major with grade 0 on MIDI note 60."""

	return cantus.scale.Scale("C", "major")


@pytest.fixture
def decoder (scale: cantus.scale.Scale) -> cantus.decoder.GDVDecoder:

	"""A plain GDV decoder with no transcriptor."""

	return cantus.decoder.GDVDecoder(scale)


@pytest.fixture
def transcribing_decoder (scale: cantus.scale.Scale) -> cantus.decoder.GDVDecoder:

	"""A GDV decoder that expands ornaments with the default features."""

	transcriptor = cantus.transcription.Transcriptor(cantus.transcription.default_features())

	return cantus.decoder.GDVDecoder(scale, transcriptor=transcriptor)


@pytest.fixture
def sequencer () -> cantus.sequencer.TicklessSequencer:

	"""A tickless sequencer starting at position 0."""

	return cantus.sequencer.TicklessSequencer()


@pytest.fixture
def recording_sequencer () -> RecordingSequencer:

	"""A sequencer that only records what was scheduled."""

	return RecordingSequencer()
