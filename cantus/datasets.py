"""Dataset types stored in a score.

A :class:`Dataset` is anything a :class:`~cantus.score.Score` accepts: it
only has to know its own ``duration``. Leaves derive from :class:`Abs`
(absolute, already-decoded values) and a ``Score`` is itself a ``Dataset``,
which is how scores nest.

The absolute states produced by the decoder are immutable values: each
decode step builds a new :class:`GDV` (or :class:`Event`) and never mutates
one that has already been handed out.
"""

import dataclasses
import fractions
import types
import typing

import cantus.rational


class Dataset:

	"""
	Base for every value a score can hold.

	Subclasses must provide a ``duration`` (a Fraction of a bar).
	"""

	duration: fractions.Fraction


class Abs (Dataset):

	"""
	A leaf dataset holding absolute values, as opposed to a nested score.
	"""

	is_event = False


	def get (self, attribute: str, default: typing.Any = None) -> typing.Any:

		"""
		Return the value of a named attribute, or ``default`` when absent.
		"""

		raise NotImplementedError


	def __getitem__ (self, attribute: str) -> typing.Any:

		value = self.get(attribute, _MISSING)

		if value is _MISSING:
			raise KeyError(attribute)

		return value


	def as_dict (self) -> typing.Dict[str, typing.Any]:

		"""
		Plain-data view of the dataset, with Fractions written as ``"n/d"``.
		"""

		raise NotImplementedError


_MISSING = object()


def freeze_mapping (mapping: typing.Optional[typing.Mapping[str, typing.Any]]) -> typing.Mapping[str, typing.Any]:

	"""Return a read-only copy of a mapping."""

	return types.MappingProxyType(dict(mapping or {}))


def _hashable (value: typing.Any) -> typing.Any:

	"""Hashable stand-in for mappings and lists found in modifiers."""

	if isinstance(value, typing.Mapping):
		return tuple(sorted((k, _hashable(v)) for k, v in value.items()))

	if isinstance(value, (set, frozenset)):
		return frozenset(_hashable(v) for v in value)

	if isinstance(value, (list, tuple)):
		return tuple(_hashable(v) for v in value)

	return value


def _plain (value: typing.Any) -> typing.Any:

	"""Convert a value for ``as_dict()`` output."""

	if isinstance(value, fractions.Fraction):
		return cantus.rational.format_time(value)

	if isinstance(value, Abs):
		return value.as_dict()

	return value


@dataclasses.dataclass(frozen=True)
class GDV (Abs):

	"""
	An absolute Grade / Duration / Velocity state.

	``grade`` is an absolute scale degree (already resolved through a scale),
	``duration`` a Fraction of a bar, ``velocity`` a dynamic level (see
	:mod:`cantus.constants.velocity`). ``sharps`` raises (or, negative,
	lowers) the degree chromatically and ``silence`` marks a rest that keeps
	the grade for later relative steps. ``modifiers`` carries ornaments and
	other per-note annotations, either plain values or nested ``GDV`` states.

	States are hashable, so they can be grouped and collected in sets.
	"""

	grade: int = 0
	duration: fractions.Fraction = fractions.Fraction(1, 4)
	velocity: int = 0
	octave: typing.Optional[int] = None
	sharps: int = 0
	silence: bool = False
	note_duration: typing.Optional[fractions.Fraction] = None
	modifiers: typing.Mapping[str, typing.Any] = dataclasses.field(default_factory=dict)


	def __post_init__ (self) -> None:

		duration = cantus.rational.rationalize(self.duration)

		if duration < 0:
			raise ValueError(f"Duration cannot be negative: {duration}")

		object.__setattr__(self, "duration", duration)

		if self.note_duration is not None:
			object.__setattr__(self, "note_duration", cantus.rational.rationalize(self.note_duration))

		object.__setattr__(self, "modifiers", freeze_mapping(self.modifiers))


	def __hash__ (self) -> int:

		return hash((
			self.grade,
			self.duration,
			self.velocity,
			self.octave,
			self.sharps,
			self.silence,
			self.note_duration,
			_hashable(self.modifiers),
		))


	def get (self, attribute: str, default: typing.Any = None) -> typing.Any:

		"""
		Look up a state field, falling back to the modifiers.
		"""

		if attribute in _GDV_FIELDS:
			value = getattr(self, attribute)
			return default if value is None else value

		return self.modifiers.get(attribute, default)


	def replace (self, **changes: typing.Any) -> "GDV":

		"""
		Return a copy with some fields changed.
		"""

		return dataclasses.replace(self, **changes)


	def with_modifier (self, name: str, value: typing.Any) -> "GDV":

		"""Return a copy with one modifier added or replaced."""

		modifiers = dict(self.modifiers)
		modifiers[name] = value

		return dataclasses.replace(self, modifiers=modifiers)


	def without_modifier (self, name: str) -> "GDV":

		"""Return a copy with one modifier removed."""

		modifiers = {k: v for k, v in self.modifiers.items() if k != name}

		return dataclasses.replace(self, modifiers=modifiers)


	def as_dict (self) -> typing.Dict[str, typing.Any]:

		result: typing.Dict[str, typing.Any] = {
			"grade": self.grade,
			"duration": _plain(self.duration),
			"velocity": self.velocity,
		}

		if self.octave is not None:
			result["octave"] = self.octave

		if self.sharps:
			result["sharps"] = self.sharps

		if self.silence:
			result["silence"] = True

		if self.note_duration is not None:
			result["note_duration"] = _plain(self.note_duration)

		if self.modifiers:
			result["modifiers"] = {k: _plain(v) for k, v in self.modifiers.items()}

		return result


_GDV_FIELDS = frozenset(f.name for f in dataclasses.fields(GDV) if f.name != "modifiers")


@dataclasses.dataclass(frozen=True)
class Event (Abs):

	"""
	A standalone, zero-length event carrying an opaque payload.
	"""

	event: typing.Any
	duration: fractions.Fraction = fractions.Fraction(0)

	is_event = True


	def get (self, attribute: str, default: typing.Any = None) -> typing.Any:

		if attribute == "event":
			return self.event

		if attribute == "duration":
			return self.duration

		return default


	def as_dict (self) -> typing.Dict[str, typing.Any]:

		return {"event": _plain(self.event), "duration": _plain(self.duration)}


class AbsD (Abs):

	"""
	A generic, read-only bag of attributes with a duration.

	Useful for scores of non-GDV data::

		AbsD(duration=1, criteria="a", value=1000)

	A missing ``duration`` means a zero-length entry.
	"""

	def __init__ (self, attributes: typing.Optional[typing.Mapping[str, typing.Any]] = None, **kwargs: typing.Any) -> None:

		merged = dict(attributes or {})
		merged.update(kwargs)

		if "duration" in merged and merged["duration"] is not None:
			merged["duration"] = cantus.rational.rationalize(merged["duration"])

		self._attributes = freeze_mapping(merged)


	@property
	def duration (self) -> fractions.Fraction:

		"""Length of the entry; zero when it was not given."""

		return self._attributes.get("duration") or fractions.Fraction(0)


	def get (self, attribute: str, default: typing.Any = None) -> typing.Any:

		value = self._attributes.get(attribute)

		return default if value is None else value


	def as_dict (self) -> typing.Dict[str, typing.Any]:

		return {k: _plain(v) for k, v in self._attributes.items()}


	def __repr__ (self) -> str:

		return f"AbsD({dict(self._attributes)!r})"
