"""Grade / Duration / Velocity differential codec.

A :class:`Command` describes how to get from one absolute state to the next.
Each field can be given at most one way:

- grade: ``abs_grade`` (int or symbol, resolved through the scale, or
  ``"silence"`` for a rest) or ``delta_grade`` (steps added to the current
  grade)
- sharps: ``abs_sharps`` (set with an absolute grade) or ``delta_sharps``
  (chromatic steps; the result is folded back onto the scale when it lands
  on a degree)
- octave: ``abs_octave`` or ``delta_octave``
- duration: ``abs_duration``, ``delta_duration`` or ``factor_duration``
- velocity: ``abs_velocity`` or ``delta_velocity`` (dynamic levels)

Fields that are absent leave the state unchanged. An ``event`` command
bypasses accumulation entirely and produces an :class:`~cantus.datasets.Event`.

:func:`parse` turns raw input into a ``Command`` and :func:`apply` folds a
command into a state. Both are pure; the stateful side lives in
:mod:`cantus.decoder`.

Textual neuma attributes (``"+2.1/2.ff"`` split on dots) are read as:

- first attribute: grade (``+2``/``-1`` relative, ``3``, ``V`` or ``silence``
  absolute), followed by ``#`` (sharp) or ``_`` (flat) runs. A relative
  grade multiplies its alterations by its sign, so ``-1#`` is one step down
  and one flat. A bare ``+#`` raises the current note a semitone (a neuma
  cannot start with ``#``, which opens a comment)
- any attribute matching ``mp``, ``mf`` or ``[+-]?(p+|f+)``: velocity
- any attribute matching ``[+-]?o[+-]?N``: octave
- next remaining attribute: duration (``+1/4`` relative, ``*2`` factor,
  ``3/4`` absolute)
"""

import dataclasses
import fractions
import logging
import re
import typing

import mido

import cantus.constants.velocity
import cantus.datasets
import cantus.neumas
import cantus.rational


logger = logging.getLogger(__name__)


class UnrecognizedCommandKeys (ValueError):

	"""
	Raised when raw input carries none of the keys a command can be built from.
	"""


class ScaleLike (typing.Protocol):

	"""
	The part of a scale the codec needs.
	"""

	def note_of (self, grade: typing.Union[int, str]) -> int:
		...

	def normalize (self, grade: int, sharps: int) -> typing.Tuple[int, int]:
		...


_EXCLUSIVE_FIELDS: typing.Dict[str, typing.Tuple[str, ...]] = {
	"grade": ("abs_grade", "delta_grade"),
	"sharps": ("abs_sharps", "delta_sharps"),
	"octave": ("abs_octave", "delta_octave"),
	"duration": ("abs_duration", "delta_duration", "factor_duration"),
	"velocity": ("abs_velocity", "delta_velocity"),
}

SILENCE = "silence"

_DURATION_FIELDS = ("abs_duration", "delta_duration", "factor_duration")

_INTEGER = re.compile(r"\A[+-]?[0-9]+\Z")
_GRADE = re.compile(r"\A(?P<sign>[+-]?)(?P<name>[^#_]*)(?P<sharps>#*)(?P<flats>_*)\Z")
_VELOCITY = re.compile(r"\A(mp|mf|[+-]?(p+|f+))\Z")
_OCTAVE = re.compile(r"\A(?P<sign>[+-]?)o(?P<value>[+-]?[0-9]+)\Z")


@dataclasses.dataclass(frozen=True)
class Command:

	"""
	A parsed differential instruction.

	``modifiers`` holds per-note annotations; values that are themselves
	``Command`` objects (an appoggiatura, for instance) are resolved into
	nested absolute states when the command is applied.
	"""

	abs_grade: typing.Optional[typing.Union[int, str]] = None
	delta_grade: typing.Optional[int] = None
	abs_sharps: typing.Optional[int] = None
	delta_sharps: typing.Optional[int] = None
	abs_octave: typing.Optional[int] = None
	delta_octave: typing.Optional[int] = None
	abs_duration: typing.Optional[fractions.Fraction] = None
	delta_duration: typing.Optional[fractions.Fraction] = None
	factor_duration: typing.Optional[fractions.Fraction] = None
	abs_velocity: typing.Optional[int] = None
	delta_velocity: typing.Optional[int] = None
	event: typing.Any = None
	comment: typing.Optional[str] = None
	modifiers: typing.Mapping[str, typing.Any] = dataclasses.field(default_factory=dict)


	def __post_init__ (self) -> None:

		for field, names in _EXCLUSIVE_FIELDS.items():

			present = [name for name in names if getattr(self, name) is not None]

			if len(present) > 1:
				raise ValueError(f"Conflicting {field} representations in one command: {present}")

		for name in _DURATION_FIELDS:
			value = getattr(self, name)
			if value is not None:
				object.__setattr__(self, name, cantus.rational.rationalize(value))

		object.__setattr__(self, "modifiers", cantus.datasets.freeze_mapping(self.modifiers))


	@property
	def is_comment (self) -> bool:

		"""True when the command carries nothing but a comment."""

		if self.comment is None or self.event is not None or self.modifiers:
			return False

		return all(getattr(self, name) is None for names in _EXCLUSIVE_FIELDS.values() for name in names)


	@classmethod
	def from_mapping (cls, mapping: typing.Mapping[str, typing.Any]) -> "Command":

		"""
		Build a command from a mapping of field names, ignoring unknown keys.
		"""

		values = {k: v for k, v in mapping.items() if k in COMMAND_FIELDS}

		if "modifiers" in values:
			values["modifiers"] = _parse_modifiers(values["modifiers"])

		return cls(**values)


COMMAND_FIELDS = frozenset(f.name for f in dataclasses.fields(Command))

RECOGNIZED_KEYS = COMMAND_FIELDS | {"attributes"}


RawCommand = typing.Union[Command, str, typing.Mapping[str, typing.Any]]


def parse (raw: RawCommand) -> Command:

	"""
	Decompose raw input into a :class:`Command`.

	Accepts a ``Command`` (returned as is), a neuma string (``"+2.1/2.f"``),
	a mapping with an ``attributes`` list of textual attributes, an ``event``
	or a ``comment``, or a mapping of command fields
	(``{"delta_grade": 1}``).

	Raises:
		UnrecognizedCommandKeys: When the input carries none of those keys.
	"""

	if isinstance(raw, Command):
		return raw

	if isinstance(raw, str):
		raw = cantus.neumas.to_raw(raw)

	if not isinstance(raw, typing.Mapping):
		raise UnrecognizedCommandKeys(f"Not processable data {raw!r}. Expected a mapping, a string or a Command")

	if "attributes" in raw:

		command = parse_attributes(raw["attributes"])

		if raw.get("modifiers"):
			command = dataclasses.replace(command, modifiers=_parse_modifiers(raw["modifiers"]))

		return command

	if not COMMAND_FIELDS.intersection(raw.keys()):
		raise UnrecognizedCommandKeys(
			f"Not processable data {dict(raw)!r}. Keys allowed are 'attributes', 'event', 'comment' "
			f"or command fields {sorted(COMMAND_FIELDS - {'event', 'comment'})}"
		)

	if "event" in raw and raw["event"] is None:
		raise ValueError("An event command needs a payload")

	return Command.from_mapping(raw)


def _parse_modifiers (modifiers: typing.Optional[typing.Mapping[str, typing.Any]]) -> typing.Dict[str, typing.Any]:

	"""Parse modifier values that are themselves raw commands."""

	parsed: typing.Dict[str, typing.Any] = {}

	for name, value in (modifiers or {}).items():

		if isinstance(value, (Command, typing.Mapping)):
			parsed[name] = parse(value)

		else:
			parsed[name] = value

	return parsed


def parse_attributes (attributes: typing.Sequence[str]) -> Command:

	"""
	Build a command from textual neuma attributes.

	Example:
		```python
		parse_attributes(["+2", "1/2", "ff"])
		# Command(delta_grade=2, abs_duration=Fraction(1, 2), abs_velocity=2)
		```
	"""

	if isinstance(attributes, str):
		attributes = attributes.split(".")

	remaining = [a.strip() for a in attributes]
	fields: typing.Dict[str, typing.Any] = {}

	grade = remaining.pop(0) if remaining else ""

	if grade:
		fields.update(_parse_grade(grade))

	velocity = next((a for a in remaining if _VELOCITY.match(a)), None)

	if velocity is not None:
		remaining.remove(velocity)
		fields.update(parse_velocity(velocity))

	octave = next((a for a in remaining if _OCTAVE.match(a)), None)

	if octave is not None:
		remaining.remove(octave)
		fields.update(_parse_octave(octave))

	duration = remaining.pop(0) if remaining else ""

	if duration:
		if duration[0] in "+-":
			fields["delta_duration"] = cantus.rational.rationalize(duration)
		elif duration[0] == "*":
			fields["factor_duration"] = cantus.rational.rationalize(duration[1:])
		else:
			fields["abs_duration"] = cantus.rational.rationalize(duration)

	if remaining:
		logger.debug(f"Ignoring unrecognized neuma attributes: {remaining}")

	return Command(**fields)


def _parse_grade (text: str) -> typing.Dict[str, typing.Any]:

	"""
	Parse a grade attribute with its trailing ``#``/``_`` alterations.

	A sign, or an alteration with no grade before it, makes it relative.
	"""

	match = _GRADE.match(text)

	if match is None:
		raise ValueError(f"Not a grade attribute: {text!r}")

	name = match.group("name")
	sharps = len(match.group("sharps")) - len(match.group("flats"))

	if match.group("sign") or not name:

		sign = -1 if match.group("sign") == "-" else 1
		fields: typing.Dict[str, typing.Any] = {}

		if name:
			fields["delta_grade"] = sign * _to_int(name)

		if sharps:
			fields["delta_sharps"] = sign * sharps

		return fields or {"delta_grade": 0}

	fields = {"abs_grade": int(name) if _INTEGER.match(name) else name}

	if sharps:
		fields["abs_sharps"] = sharps

	return fields


def _to_int (text: str) -> int:

	"""Parse an unsigned integer grade."""

	if not text.isdigit():
		raise ValueError(f"Not an integer grade: {text!r}")

	return int(text)


def _parse_octave (text: str) -> typing.Dict[str, int]:

	"""Parse ``o2`` (absolute) or ``+o1``/``-o1`` (relative)."""

	match = _OCTAVE.match(text)

	if match is None:
		raise ValueError(f"Not an octave attribute: {text!r}")

	value = int(match.group("value"))

	if match.group("sign"):
		sign = 1 if match.group("sign") == "+" else -1
		return {"delta_octave": sign * value}

	return {"abs_octave": value}


def velocity_level_of (mark: str) -> int:

	"""
	Return the dynamic level of an absolute mark (``"pp"`` is -2, ``"f"`` is 1).
	"""

	if mark in cantus.constants.velocity.DYNAMICS:
		return cantus.constants.velocity.DYNAMICS[mark]

	if mark and set(mark) == {"p"}:
		return -len(mark)

	if mark and set(mark) == {"f"}:
		return len(mark)

	raise ValueError(f"Unknown dynamic mark: {mark!r}")


def parse_velocity (text: str) -> typing.Dict[str, int]:

	"""
	Parse a textual velocity into ``abs_velocity`` or ``delta_velocity``.

	A leading sign makes it relative: ``+f`` is one mark louder, ``+pp`` two
	marks quieter and ``-p`` one mark louder.
	"""

	if not _VELOCITY.match(text):
		raise ValueError(f"Not a velocity attribute: {text!r}")

	if text[0] in "+-":
		sign = 1 if text[0] == "+" else -1
		run = text[1:]
		direction = 1 if run[0] == "f" else -1
		return {"delta_velocity": sign * direction * len(run)}

	return {"abs_velocity": velocity_level_of(text)}


def mark_of_level (level: int) -> str:

	"""Inverse of :func:`velocity_level_of`; level 0 is ``"mp"``."""

	if level == 0:
		return "mp"

	return ("f" if level > 0 else "p") * abs(level)


def apply (command: Command, state: cantus.datasets.GDV, scale: ScaleLike) -> cantus.datasets.Abs:

	"""
	Fold a command into a state and return the resulting absolute state.

	The input state is never modified. Modifiers of the previous state are
	not carried over; the command's own modifiers are attached to the result,
	with nested commands resolved against ``state``.
	"""

	if command.event is not None:
		return cantus.datasets.Event(event=command.event)

	changes: typing.Dict[str, typing.Any] = {}

	if command.abs_grade == SILENCE:
		changes["silence"] = True

	elif command.abs_grade is not None:
		changes["grade"] = scale.note_of(command.abs_grade)
		changes["sharps"] = (command.abs_sharps or 0) + (command.delta_sharps or 0)
		changes["silence"] = False

	elif command.delta_grade is not None or command.delta_sharps is not None:
		grade = state.grade + (command.delta_grade or 0)
		sharps = state.sharps + (command.delta_sharps or 0)
		changes["grade"], changes["sharps"] = scale.normalize(grade, sharps)
		changes["silence"] = False

	elif command.abs_sharps is not None:
		changes["grade"], changes["sharps"] = scale.normalize(state.grade, command.abs_sharps)
		changes["silence"] = False

	if command.abs_octave is not None:
		changes["octave"] = command.abs_octave
	elif command.delta_octave is not None:
		changes["octave"] = (state.octave or 0) + command.delta_octave

	if command.abs_duration is not None:
		changes["duration"] = command.abs_duration
	elif command.delta_duration is not None:
		changes["duration"] = state.duration + command.delta_duration
	elif command.factor_duration is not None:
		changes["duration"] = state.duration * command.factor_duration

	if command.abs_velocity is not None:
		changes["velocity"] = command.abs_velocity
	elif command.delta_velocity is not None:
		changes["velocity"] = state.velocity + command.delta_velocity

	modifiers: typing.Dict[str, typing.Any] = {}

	for name, value in command.modifiers.items():

		if isinstance(value, Command):
			modifiers[name] = apply(value, state, scale)
		else:
			modifiers[name] = value

	return state.replace(note_duration=None, modifiers=modifiers, **changes)


def midi_velocity_of (level: int) -> int:

	"""
	Map a dynamic level onto the 8-point MIDI velocity table (clamped).
	"""

	table = cantus.constants.velocity.MIDI_VELOCITIES
	index = level + cantus.constants.velocity.MIDI_VELOCITY_OFFSET

	# mf shares level 0 with mp, so its slot is skipped above mp
	if level > 0:
		index += 1

	index = min(max(index, 0), len(table) - 1)

	return table[index]


class PitchScaleLike (ScaleLike, typing.Protocol):

	"""A scale that can also produce MIDI pitches."""

	def pitch_of (self, grade: int, octave: int = 0) -> int:
		...


def to_midi_note_on_or_event (state: cantus.datasets.Abs, scale: PitchScaleLike, channel: int = 0) -> typing.Any:

	"""
	Project an absolute state onto a MIDI ``note_on`` message.

	Event states return their payload unchanged and a silence returns
	``None``: a rest has no note to start.
	"""

	if isinstance(state, cantus.datasets.Event):
		return state.event

	if not isinstance(state, cantus.datasets.GDV):
		raise TypeError(f"Cannot project {state!r} onto MIDI")

	if state.silence:
		return None

	note = scale.pitch_of(state.grade, state.octave or 0) + state.sharps

	if not 0 <= note <= 127:
		raise ValueError(f"Grade {state.grade} (octave {state.octave}) is outside the MIDI note range: {note}")

	return mido.Message("note_on", channel=channel, note=note, velocity=midi_velocity_of(state.velocity))


def to_neuma (state: cantus.datasets.GDV) -> str:

	"""
	Write an absolute state as a dotted neuma (``"2.o1.1/2.ff"``).

	For non-negative grades the result parses back into absolute commands
	that rebuild the state (a leading ``-`` would read as a relative grade).
	A silence is written as ``silence``, which keeps the grade it is read
	against.
	"""

	if state.silence:
		attributes = [SILENCE]
	else:
		attributes = [str(state.grade) + ("#" if state.sharps > 0 else "_") * abs(state.sharps)]

	if state.octave is not None:
		attributes.append(f"o{state.octave}")

	attributes.append(cantus.rational.format_time(state.duration))
	attributes.append(mark_of_level(state.velocity))

	return ".".join(attributes)


def to_gdvd (state: cantus.datasets.Abs, previous: typing.Optional[cantus.datasets.GDV] = None) -> Command:

	"""
	Encode a state as the command that rebuilds it.

	Without ``previous`` the command is absolute. With one it only carries
	what changed, so that ``apply(to_gdvd(state, previous), previous, scale)``
	gives ``state`` back. Nested states in the modifiers are encoded against
	the same ``previous``, which is what they are resolved against.

	A silence keeps the grade it is applied to, and chromatic alterations
	come back folded onto the scale.
	"""

	if isinstance(state, cantus.datasets.Event):
		return Command(event=state.event)

	if not isinstance(state, cantus.datasets.GDV):
		raise TypeError(f"Cannot encode {state!r} as a command")

	fields: typing.Dict[str, typing.Any] = {}

	if previous is None:

		if state.silence:
			fields["abs_grade"] = SILENCE
		else:
			fields["abs_grade"] = state.grade
			if state.sharps:
				fields["abs_sharps"] = state.sharps

		if state.octave is not None:
			fields["abs_octave"] = state.octave

		fields["abs_duration"] = state.duration
		fields["abs_velocity"] = state.velocity

	else:

		if state.silence:
			fields["abs_grade"] = SILENCE

		elif state.grade != previous.grade or state.sharps != previous.sharps or previous.silence:
			fields["delta_grade"] = state.grade - previous.grade
			if state.sharps != previous.sharps:
				fields["delta_sharps"] = state.sharps - previous.sharps

		if state.octave is not None and state.octave != previous.octave:
			if previous.octave is None:
				fields["abs_octave"] = state.octave
			else:
				fields["delta_octave"] = state.octave - previous.octave

		if state.duration != previous.duration:
			fields["delta_duration"] = state.duration - previous.duration

		if state.velocity != previous.velocity:
			fields["delta_velocity"] = state.velocity - previous.velocity

	modifiers: typing.Dict[str, typing.Any] = {}

	for name, value in state.modifiers.items():

		if isinstance(value, cantus.datasets.Abs):
			modifiers[name] = to_gdvd(value, previous)
		else:
			modifiers[name] = value

	return Command(modifiers=modifiers, **fields)
