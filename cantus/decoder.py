"""Stateful decoders turning differential commands into absolute states.

The decoding contract has three stages:

- ``parse(raw)`` - pure syntactic decomposition into a :class:`~cantus.gdv.Command`
- ``apply(command, on=state)`` - pure accumulation onto a previous state
- ``decode(raw)`` - parse, apply, and persist the result as the running state

Only ``decode`` is stateful. A :class:`Decoder` owns its running state
(``last``) and replaces it wholesale after every successful non-event decode.
States are immutable, so nothing handed out by ``decode`` can change later.

Independent voices or ornaments are decoded with a :meth:`Decoder.subcontext`,
a new decoder seeded with the parent's current state. The two can then be
advanced in any interleaving without affecting each other.

Example:
	```python
	decoder = cantus.decoder.GDVDecoder(cantus.scale.Scale("D", "dorian"))

	decoder.decode("0")
	decoder.decode("+2.1/2.f")     # GDV(grade=2, duration=1/2, velocity=1)

	voice = decoder.subcontext()
	voice.decode("+1")             # grade 3 in the voice only
	decoder.last.grade             # still 2
	```
"""

import fractions
import logging
import typing

import cantus.constants.durations
import cantus.constants.velocity
import cantus.datasets
import cantus.gdv
import cantus.rational
import cantus.scale


logger = logging.getLogger(__name__)


UnrecognizedCommandKeys = cantus.gdv.UnrecognizedCommandKeys


class TranscriptorLike (typing.Protocol):

	"""
	Post-processes each decoded state (expanding ornaments, for instance).
	"""

	def transcript (self, state: cantus.datasets.GDV) -> typing.Any:
		...


class ProtoDecoder:

	"""
	Abstract decoder: anything with ``decode`` and ``subcontext``.
	"""

	def subcontext (self) -> "ProtoDecoder":

		"""
		Return a decoder for nested material. Stateless decoders return themselves.
		"""

		return self


	def decode (self, raw: typing.Any) -> typing.Any:

		raise NotImplementedError


class DifferentialDecoder (ProtoDecoder):

	"""
	A decoder with a separate, pure parse stage.
	"""

	def decode (self, raw: typing.Any) -> typing.Any:

		return self.parse(raw)


	def parse (self, raw: typing.Any) -> cantus.gdv.Command:

		raise NotImplementedError


class Decoder (DifferentialDecoder):

	"""
	A decoder that accumulates a running state across ``decode`` calls.

	Subclasses provide ``parse``, ``apply`` and ``subcontext``.
	"""

	def __init__ (self, base: cantus.datasets.GDV, transcriptor: typing.Optional[TranscriptorLike] = None) -> None:

		"""
		Create a decoder seeded with ``base``.

		Parameters:
			base: The initial absolute state.
			transcriptor: Optional post-processor called with every
				non-event result; its return value is what ``decode`` returns.
		"""

		self._base = base
		self._last = base
		self.transcriptor = transcriptor


	@property
	def base (self) -> cantus.datasets.GDV:

		"""The seed state."""

		return self._base


	@base.setter
	def base (self, base: cantus.datasets.GDV) -> None:

		"""Replace the seed state and reset the running state to it."""

		self._base = base
		self._last = base


	@property
	def last (self) -> cantus.datasets.GDV:

		"""The current running state."""

		return self._last


	def decode (self, raw: typing.Any) -> typing.Any:

		"""
		Parse and apply ``raw`` on the running state, then persist the result.

		Event results are returned as they are and never become the new
		running state. Comment-only input returns ``None`` and changes nothing.

		Raises:
			UnrecognizedCommandKeys: When ``raw`` is not a recognizable command.
		"""

		command = self.parse(raw)

		if command.is_comment:
			logger.debug(f"Skipping comment: {command.comment!r}")
			return None

		result = self.apply(command, on=self._last)

		if result.is_event:
			logger.debug(f"Decoded event {result!r}")
			return result

		self._last = result

		logger.debug(f"Decoded {result!r}")

		if self.transcriptor is not None:
			return self.transcriptor.transcript(result)

		return result


	def apply (self, command: cantus.gdv.Command, on: cantus.datasets.GDV) -> cantus.datasets.Abs:

		raise NotImplementedError


	def subcontext (self) -> "Decoder":

		raise NotImplementedError


class GDVDecoder (Decoder):

	"""
	Decodes Grade / Duration / Velocity commands against a scale.
	"""

	def __init__ (
		self,
		scale: typing.Optional[cantus.gdv.ScaleLike] = None,
		base_duration: typing.Optional[cantus.rational.RationalLike] = None,
		transcriptor: typing.Optional[TranscriptorLike] = None,
		base: typing.Optional[cantus.datasets.GDV] = None,
	) -> None:

		"""
		Create a GDV decoder.

		Parameters:
			scale: Resolves absolute grades (defaults to C major).
			base_duration: Duration of the seed state when ``base`` is not
				given (defaults to the duration of ``base``, else 1/4).
			transcriptor: Optional post-processor for decoded states.
			base: Seed state (defaults to grade 0, octave 0, ``mp``).
		"""

		if base_duration is None:
			base_duration = base.duration if base is not None else cantus.constants.durations.QUARTER

		self.base_duration: fractions.Fraction = cantus.rational.rationalize(base_duration)
		self.scale = scale if scale is not None else cantus.scale.Scale()

		if base is None:
			base = cantus.datasets.GDV(grade=0, octave=0, duration=self.base_duration, velocity=cantus.constants.velocity.DEFAULT_LEVEL)

		super().__init__(base, transcriptor=transcriptor)


	def parse (self, raw: cantus.gdv.RawCommand) -> cantus.gdv.Command:

		return cantus.gdv.parse(raw)


	def apply (self, command: cantus.gdv.Command, on: cantus.datasets.GDV) -> cantus.datasets.Abs:

		"""
		Fold ``command`` into ``on``; nested modifier commands (an
		appoggiatura, say) are resolved against ``on`` as well.
		"""

		return cantus.gdv.apply(command, on, self.scale)


	def subcontext (self) -> "GDVDecoder":

		"""
		Return an independent decoder seeded with the current running state.

		The scale and transcriptor are shared; running states are not.
		"""

		return GDVDecoder(
			self.scale,
			base_duration = self.base_duration,
			transcriptor = self.transcriptor,
			base = self._last
		)


	def __repr__ (self) -> str:

		return f"GDVDecoder(last={self._last!r})"
