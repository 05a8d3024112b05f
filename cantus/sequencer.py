"""Logical-time sequencers for projecting scores.

Playback (:mod:`cantus.playback`) needs exactly three things from a
sequencer: the current ``position``, ``at(time, callback)`` to schedule at an
absolute position and ``wait(duration, callback)`` to schedule relative to the
current position. :class:`SequencerLike` spells that out.

:class:`TicklessSequencer` is an in-memory implementation with no clock at
all: positions are Fractions, callbacks are kept in a heap, and ``run()``
jumps from one scheduled position to the next. It is what tests, offline
rendering and the command line use.
"""

import dataclasses
import fractions
import heapq
import itertools
import logging
import typing

import cantus.rational


logger = logging.getLogger(__name__)


Callback = typing.Callable[[], typing.Any]


@typing.runtime_checkable
class SequencerLike (typing.Protocol):

	"""
	Protocol for anything playback can schedule onto.
	"""

	@property
	def position (self) -> fractions.Fraction:
		...


	def at (self, time: cantus.rational.RationalLike, callback: Callback) -> None:

		"""
		Run ``callback`` when the sequencer reaches ``time``.
		"""

		...


	def wait (self, duration: cantus.rational.RationalLike, callback: Callback) -> None:

		"""
		Run ``callback`` ``duration`` after the current position.
		"""

		...


@dataclasses.dataclass
class ScheduledCallback:

	"""
	A callback waiting for its position.
	"""

	position: fractions.Fraction
	callback: Callback


class TicklessSequencer:

	"""
	A synchronous sequencer over exact rational positions.

	Callbacks scheduled for the same position run in scheduling order.
	Callbacks may schedule further callbacks; ``run()`` keeps going until
	the queue is empty.
	"""

	def __init__ (self, position: cantus.rational.RationalLike = 0) -> None:

		"""
		Parameters:
			position: Starting position.
		"""

		self._start = cantus.rational.rationalize(position)
		self._position = self._start
		self._queue: typing.List[typing.Tuple[fractions.Fraction, int, ScheduledCallback]] = []
		self._counter = itertools.count()


	@property
	def position (self) -> fractions.Fraction:

		"""The current logical position."""

		return self._position


	@property
	def pending (self) -> int:

		"""Number of callbacks still queued."""

		return len(self._queue)


	def at (self, time: cantus.rational.RationalLike, callback: Callback) -> None:

		"""
		Schedule ``callback`` at an absolute position.

		Positions already passed fire at the current position instead, with a warning.
		"""

		time = cantus.rational.rationalize(time)

		if time < self._position:
			logger.warning(f"Scheduling at {time} which is before the current position {self._position}; running at {self._position}")
			time = self._position

		scheduled = ScheduledCallback(position=time, callback=callback)
		heapq.heappush(self._queue, (time, next(self._counter), scheduled))

		logger.debug(f"Scheduled callback at {time}, queue size: {len(self._queue)}")


	def wait (self, duration: cantus.rational.RationalLike, callback: Callback) -> None:

		"""
		Schedule ``callback`` ``duration`` after the current position.
		"""

		self.at(self._position + cantus.rational.rationalize(duration), callback)


	def run (self) -> None:

		"""
		Run every queued callback in position order until nothing is left.
		"""

		while self._queue:
			self._run_next()


	def run_until (self, position: cantus.rational.RationalLike) -> None:

		"""
		Run the callbacks up to and including ``position``, then move there.

		Raises:
			ValueError: When ``position`` is before the current position.
		"""

		position = cantus.rational.rationalize(position)

		if position < self._position:
			raise ValueError(f"Cannot move back from {self._position} to {position}")

		while self._queue and self._queue[0][0] <= position:
			self._run_next()

		self._position = position


	def reset (self) -> None:

		"""Drop every pending callback and go back to the starting position."""

		self._queue.clear()
		self._counter = itertools.count()
		self._position = self._start


	def _run_next (self) -> None:

		"""Pop the earliest callback, move to its position and run it."""

		time, _, scheduled = heapq.heappop(self._queue)

		self._position = time
		scheduled.callback()
