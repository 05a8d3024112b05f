"""Ornament expansion for decoded states.

A :class:`Transcriptor` is the optional side-channel of a decoder: every
non-event state the decoder produces goes through ``transcript()``, which
returns the list of states that should actually sound. Each feature looks for
one modifier on a state and, when present, replaces that state with its
realisation:

- ``appoggiatura`` - a nested state played first, taking its duration from the main note
- ``mor`` - mordent (``True``/``"up"`` or ``"down"``)
- ``turn`` - four-note turn (``True``/``"up"`` or ``"down"``)
- ``st`` - staccato; ``True`` halves the sounding length, ``n`` divides it by ``2**n``

Example:
	```python
	transcriptor = cantus.transcription.Transcriptor(
		cantus.transcription.default_features()
	)
	decoder = cantus.decoder.GDVDecoder(scale, transcriptor=transcriptor)

	decoder.decode({"attributes": ["+2", "1/2"], "modifiers": {"mor": True}})
	# -> three GDV states: the note, the upper neighbour, the note again
	```
"""

import fractions
import logging
import typing

import cantus.constants.durations
import cantus.datasets
import cantus.rational


logger = logging.getLogger(__name__)


_UP = (True, "up")
_DOWN = ("down", "low")


class Feature:

	"""
	One ornament expander in a transcription chain.
	"""

	def transcript (self, state: cantus.datasets.GDV, base_duration: fractions.Fraction, tick_duration: fractions.Fraction) -> typing.List[cantus.datasets.GDV]:

		"""
		Return the states that replace ``state``; ``[state]`` when untouched.
		"""

		raise NotImplementedError


def _direction_of (value: typing.Any, modifier: str) -> int:

	"""Return +1 for an upward ornament and -1 for a downward one."""

	if value in _UP:
		return 1

	if value in _DOWN:
		return -1

	raise ValueError(f"Unknown {modifier} direction: {value!r}")


class Appoggiatura (Feature):

	"""
	Plays a nested ``appoggiatura`` state before the main note.

	A grace note that leaves no room for its note (typically one written
	without a duration, which inherits the note's own) is shortened to
	``duration_factor`` of the base duration, never below a tick.
	"""

	def __init__ (self, duration_factor: cantus.rational.RationalLike = fractions.Fraction(1, 4)) -> None:

		self.duration_factor = cantus.rational.rationalize(duration_factor)


	def transcript (self, state: cantus.datasets.GDV, base_duration: fractions.Fraction, tick_duration: fractions.Fraction) -> typing.List[cantus.datasets.GDV]:

		grace = state.modifiers.get("appoggiatura")

		if not isinstance(grace, cantus.datasets.GDV):
			return [state]

		main = state.without_modifier("appoggiatura")

		if grace.duration >= main.duration:
			grace = grace.replace(duration=max(base_duration * self.duration_factor, tick_duration))

		if grace.duration >= main.duration:
			logger.warning(f"Note too short for an appoggiatura ({main.duration}), playing it plain")
			return [main]

		return [grace, main.replace(duration=main.duration - grace.duration)]


class Mordent (Feature):

	"""
	Alternates quickly with the neighbouring grade before settling.
	"""

	def __init__ (self, duration_factor: cantus.rational.RationalLike = fractions.Fraction(1, 4)) -> None:

		self.duration_factor = cantus.rational.rationalize(duration_factor)


	def transcript (self, state: cantus.datasets.GDV, base_duration: fractions.Fraction, tick_duration: fractions.Fraction) -> typing.List[cantus.datasets.GDV]:

		if "mor" not in state.modifiers:
			return [state]

		direction = _direction_of(state.modifiers["mor"], "mordent")
		main = state.without_modifier("mor")

		short = max(base_duration * self.duration_factor, tick_duration)

		if 2 * short >= main.duration:
			logger.warning(f"Note too short for a mordent ({main.duration}), playing it plain")
			return [main]

		return [
			main.replace(duration=short),
			main.replace(grade=main.grade + direction, duration=short),
			main.replace(duration=main.duration - 2 * short),
		]


class Turn (Feature):

	"""
	Replaces the note with upper neighbour, note, lower neighbour, note.
	"""

	def transcript (self, state: cantus.datasets.GDV, base_duration: fractions.Fraction, tick_duration: fractions.Fraction) -> typing.List[cantus.datasets.GDV]:

		if "turn" not in state.modifiers:
			return [state]

		direction = _direction_of(state.modifiers["turn"], "turn")
		main = state.without_modifier("turn")
		quarter = main.duration / 4

		return [
			main.replace(grade=main.grade + offset, duration=quarter)
			for offset in (direction, 0, -direction, 0)
		]


class Staccato (Feature):

	"""
	Shortens the sounding length (``note_duration``) while keeping the rhythmic duration.
	"""

	def __init__ (self, min_duration_factor: cantus.rational.RationalLike = fractions.Fraction(1, 8)) -> None:

		self.min_duration_factor = cantus.rational.rationalize(min_duration_factor)


	def transcript (self, state: cantus.datasets.GDV, base_duration: fractions.Fraction, tick_duration: fractions.Fraction) -> typing.List[cantus.datasets.GDV]:

		if "st" not in state.modifiers:
			return [state]

		value = state.modifiers["st"]
		main = state.without_modifier("st")

		if value is True:
			calculated = main.duration / 2
		elif isinstance(value, int) and value >= 1:
			calculated = main.duration / 2 ** value
		else:
			raise ValueError(f"Unknown staccato value: {value!r}")

		return [main.replace(note_duration=max(calculated, base_duration * self.min_duration_factor))]


def default_features () -> typing.List[Feature]:

	"""
	The standard ornament chain, in application order.
	"""

	return [Appoggiatura(), Mordent(), Turn(), Staccato()]


class Transcriptor:

	"""
	Runs a chain of features over each decoded state.
	"""

	def __init__ (
		self,
		features: typing.Optional[typing.List[Feature]] = None,
		base_duration: cantus.rational.RationalLike = cantus.constants.durations.QUARTER,
		tick_duration: cantus.rational.RationalLike = cantus.constants.durations.TICK,
	) -> None:

		"""
		Parameters:
			features: Features applied in order (none by default).
			base_duration: Reference length ornaments are scaled from.
			tick_duration: Shortest note an ornament may produce.
		"""

		self.features = list(features or [])
		self.base_duration = cantus.rational.rationalize(base_duration)
		self.tick_duration = cantus.rational.rationalize(tick_duration)


	def transcript (self, state: cantus.datasets.GDV) -> typing.List[cantus.datasets.GDV]:

		"""
		Return the flat list of states ``state`` expands to.
		"""

		states = [state]

		for feature in self.features:

			expanded: typing.List[cantus.datasets.GDV] = []

			for item in states:
				expanded.extend(feature.transcript(item, self.base_duration, self.tick_duration))

			states = expanded

		return states
