"""Projecting a score onto a sequencer.

Two traversal modes, both recursive over nested scores:

- :func:`play` schedules with absolute ``on.at()`` calls, optionally at
  several start offsets.
- :func:`render` schedules with relative ``on.wait()`` calls from the
  sequencer's current position.

A slot entry at score time ``t`` is scheduled at ``start + t - resolution``,
so in a score with the default resolution of 1 the entry at time 1 plays
right at the start. Slots are visited in ascending time and entries within a
slot in insertion order. Nested scores are expanded when their own time
comes, relative to the position the sequencer has reached by then.

Example:
	```python
	sequencer = cantus.sequencer.TicklessSequencer()

	cantus.playback.play(score, sequencer, lambda state: print(sequencer.position, state))
	sequencer.run()
	```
"""

import fractions
import logging
import numbers
import typing

import cantus.datasets
import cantus.rational
import cantus.score
import cantus.sequencer


logger = logging.getLogger(__name__)


Block = typing.Callable[[cantus.datasets.Abs], typing.Any]

StartOffsets = typing.Union[None, cantus.rational.RationalLike, typing.Iterable[cantus.rational.RationalLike]]


class NotPlayable (TypeError):

	"""
	Raised when a slot entry is neither a nested score nor a leaf dataset.
	"""


def _start_offsets (at: StartOffsets, relative: bool) -> typing.List[fractions.Fraction]:

	"""Normalise the ``at`` argument of :func:`play` into a list of Fractions."""

	if at is None:
		return [fractions.Fraction(0) if relative else fractions.Fraction(1)]

	if isinstance(at, (str, numbers.Number)):
		return [cantus.rational.rationalize(at)]

	return [cantus.rational.rationalize(value) for value in at]


def _callback_for (entry: typing.Any, project: typing.Callable[[cantus.score.Score], None], block: Block) -> typing.Callable[[], None]:

	"""Build the scheduled callback for one slot entry."""

	if isinstance(entry, cantus.score.Score):
		return lambda: project(entry)

	if isinstance(entry, cantus.datasets.Abs):
		return lambda: block(entry)

	raise NotPlayable(f"Can't sequence {entry!r} because it's not an Abs dataset or a Score")



def _callbacks_for (score: cantus.score.Score, project: typing.Callable[[cantus.score.Score], None], block: Block) -> typing.List[typing.Tuple[fractions.Fraction, typing.Callable[[], None]]]:

	"""
	Build ``(time, callback)`` for every slot entry, nested scores included,
	before anything is scheduled. A bad entry anywhere raises here and leaves
	the sequencer untouched.
	"""

	callbacks = []

	for time, slot in score.each():
		for entry in slot:

			callbacks.append((time, _callback_for(entry, project, block)))

			if isinstance(entry, cantus.score.Score):
				_callbacks_for(entry, project, block)

	return callbacks


def play (
	score: cantus.score.Score,
	on: cantus.sequencer.SequencerLike,
	block: Block,
	at: StartOffsets = None,
	relative: typing.Optional[bool] = None,
) -> cantus.sequencer.SequencerLike:

	"""
	Schedule every entry of ``score`` at absolute positions on ``on``.

	Parameters:
		score: The score to project.
		on: The sequencer to schedule onto.
		block: Called with each leaf dataset when its time comes.
		at: Start offset, a finite iterable of offsets (the score is played
			once per offset), or ``None`` for ``0`` when relative and ``1``
			otherwise.
		relative: Offsets count from ``on.position`` instead of from zero.
			Defaults to ``True`` exactly when ``at`` is omitted.

	Returns:
		The sequencer, for chaining.

	Raises:
		NotPlayable: When a slot holds something that is neither a score nor
			an ``Abs`` dataset. Nothing is scheduled in that case.
	"""

	if relative is None:
		relative = at is None

	def project (nested: cantus.score.Score) -> None:
		play(nested, on, block)

	offsets = _start_offsets(at, relative)
	callbacks = _callbacks_for(score, project, block)

	for offset in offsets:

		effective_start = on.position + offset if relative else offset

		for time, callback in callbacks:
			on.at(effective_start + time - score.resolution, callback)

		logger.debug(f"Scheduled {score!r} from {effective_start}")

	return on


def render (score: cantus.score.Score, on: cantus.sequencer.SequencerLike, block: Block) -> None:

	"""
	Schedule every entry of ``score`` relative to the current position of ``on``.

	Raises:
		NotPlayable: When a slot holds something that is neither a score nor
			an ``Abs`` dataset. Nothing is scheduled in that case.
	"""

	def project (nested: cantus.score.Score) -> None:
		render(nested, on, block)

	for time, callback in _callbacks_for(score, project, block):
		on.wait(time - score.resolution, callback)

	logger.debug(f"Rendered {score!r} from {on.position}")
