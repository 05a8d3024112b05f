"""Sparse, exact-time container of datasets.

A :class:`Score` maps rational times to ordered slots of datasets. Every
insertion also goes into an interval index, so overlap queries
(:meth:`Score.between`) don't have to scan slot by slot.

Times are Fractions. ``resolution`` is the smallest addressable time unit of
the score: an entry placed at ``start`` with ``duration`` covers the closed
interval ``[start, start + duration - resolution]``, and anything shorter than
``resolution`` is treated as lasting exactly ``resolution`` (a point).

Example:
	```python
	score = cantus.score.Score()

	score.at(1, cantus.datasets.AbsD(duration=1, criteria="a"))
	score.at(1, cantus.datasets.AbsD(duration=3, criteria="b"))
	score.at(2, cantus.datasets.AbsD(duration=1, criteria="a"))

	score.times()                                  # [1, 2]
	score[1].select_by_attribute("criteria", "b")  # one entry
	score.between(2, 3).group_by_attribute("criteria")
	```
"""

import dataclasses
import fractions
import logging
import typing

import cantus.datasets
import cantus.rational


logger = logging.getLogger(__name__)


class NotADataset (TypeError):

	"""
	Raised when a value without the dataset capability is added to a score.
	"""


@dataclasses.dataclass(frozen=True, eq=False)
class IntervalEntry:

	"""
	One record of the interval index. ``finish`` is inclusive.
	"""

	start: fractions.Fraction
	finish: fractions.Fraction
	dataset: cantus.datasets.Dataset


@dataclasses.dataclass(frozen=True, eq=False)
class IntervalMatch (IntervalEntry):

	"""
	An index record returned by a window query, with its span clipped to the window.
	"""

	start_in_interval: fractions.Fraction
	finish_in_interval: fractions.Fraction


@dataclasses.dataclass(frozen=True, eq=False)
class Change (IntervalMatch):

	"""
	An entry starting (``change == "start"``) or finishing (``"finish"``) inside a window.

	``time`` is the start or finish itself and ``time_in_interval`` the same
	time clamped to the window.
	"""

	change: str
	time: fractions.Fraction
	time_in_interval: fractions.Fraction


def _attribute_of (dataset: typing.Any, attribute: str) -> typing.Any:

	"""Attribute value of a leaf dataset; nested scores have none."""

	if isinstance(dataset, cantus.datasets.Abs):
		return dataset.get(attribute)

	return None


class _Queryable (list):

	"""
	A list with attribute-based grouping, selection and sorting.

	Every query returns a new list of the same type, so queries chain.
	"""

	def _value_of (self, item: typing.Any, attribute: str) -> typing.Any:

		return _attribute_of(item, attribute)


	def group_by_attribute (self, attribute: str) -> typing.Dict[typing.Any, typing.Any]:

		"""
		Group items by the value of ``attribute`` (``None`` for missing values).
		"""

		groups: typing.Dict[typing.Any, typing.Any] = {}

		for item in self:
			groups.setdefault(self._value_of(item, attribute), type(self)()).append(item)

		return groups


	def select_by_attribute (self, attribute: str, value: typing.Any = None) -> typing.Any:

		"""
		Keep items where ``attribute`` is present, or equal to ``value`` when given.
		"""

		if value is None:
			return type(self)(item for item in self if self._value_of(item, attribute) is not None)

		return type(self)(item for item in self if self._value_of(item, attribute) == value)


	def sort_by_attribute (self, attribute: str) -> typing.Any:

		"""
		Items that have ``attribute``, sorted by it (stable).
		"""

		selected = self.select_by_attribute(attribute)

		return type(self)(sorted(selected, key=lambda item: self._value_of(item, attribute)))


class Slot (_Queryable):

	"""
	The ordered datasets placed at one time, in insertion order.
	"""


class IntervalQuery (_Queryable):

	"""
	Result of an interval query: :class:`IntervalMatch` records, sorted by
	start for :meth:`Score.between` and by time for :meth:`Score.changes_between`.

	Attribute queries look inside each entry's dataset.
	"""

	def _value_of (self, item: typing.Any, attribute: str) -> typing.Any:

		return _attribute_of(item.dataset, attribute)


	def subset (self, predicate: typing.Callable[[cantus.datasets.Dataset], bool]) -> "IntervalQuery":

		"""Keep the entries whose dataset satisfies ``predicate``."""

		return IntervalQuery(entry for entry in self if predicate(entry.dataset))


	def datasets (self) -> typing.List[cantus.datasets.Dataset]:

		"""The datasets of the entries, in order."""

		return [entry.dataset for entry in self]


class Score (cantus.datasets.Dataset):

	"""
	A sparse timeline of datasets keyed by exact rational time.

	A score is itself a dataset, so it can be placed inside another score.
	"""

	def __init__ (self, resolution: cantus.rational.RationalLike = 1) -> None:

		"""
		Parameters:
			resolution: Smallest addressable time unit (``0`` makes intervals
				end exactly at ``start + duration``).
		"""

		resolution = cantus.rational.rationalize(resolution)

		if resolution < 0:
			raise ValueError(f"Resolution cannot be negative: {resolution}")

		self._resolution = resolution
		self._slots: typing.Dict[fractions.Fraction, Slot] = {}
		self._index: typing.List[IntervalEntry] = []


	@property
	def resolution (self) -> fractions.Fraction:

		return self._resolution


	def reset (self) -> None:

		"""Remove everything."""

		self._slots.clear()
		self._index.clear()


	def at (self, time: cantus.rational.RationalLike, dataset: cantus.datasets.Dataset) -> None:

		"""
		Append ``dataset`` to the slot at ``time`` and index its interval.

		Raises:
			NotADataset: When ``dataset`` is not a :class:`~cantus.datasets.Dataset`.
		"""

		if not isinstance(dataset, cantus.datasets.Dataset):
			raise NotADataset(f"{dataset!r} is not a Dataset")

		if dataset is self:
			raise ValueError("A score cannot contain itself")

		time = cantus.rational.rationalize(time)
		duration = max(cantus.rational.rationalize(dataset.duration), self._resolution)

		self.slot(time).append(dataset)
		self._index.append(IntervalEntry(start=time, finish=time + duration - self._resolution, dataset=dataset))


	def slot (self, time: cantus.rational.RationalLike) -> Slot:

		"""
		Return the slot at ``time``, creating it empty when missing.

		Equal times always return the same list instance.
		An empty slot is not listed by :meth:`times` until something is added
		to it.
		"""

		time = cantus.rational.rationalize(time)

		if time not in self._slots:
			self._slots[time] = Slot()

		return self._slots[time]


	def __getitem__ (self, time: cantus.rational.RationalLike) -> Slot:

		return self.slot(time)


	def times (self) -> typing.List[fractions.Fraction]:

		"""Times holding at least one dataset, ascending."""

		return sorted(time for time, slot in self._slots.items() if slot)


	def each (self) -> typing.Iterator[typing.Tuple[fractions.Fraction, Slot]]:

		"""Yield ``(time, slot)`` pairs in ascending time order."""

		for time in self.times():
			yield time, self._slots[time]


	def __iter__ (self) -> typing.Iterator[typing.Tuple[fractions.Fraction, Slot]]:

		return self.each()


	def __len__ (self) -> int:

		return len(self.times())


	def between (self, closed_interval_start: cantus.rational.RationalLike, open_interval_finish: cantus.rational.RationalLike) -> IntervalQuery:

		"""
		Entries overlapping ``[closed_interval_start, open_interval_finish)``.

		An entry matches when it covers the window start, covers the window
		end, or lies fully inside. Finishes are inclusive, so an entry whose
		finish equals the window start still matches; this is what makes
		adjacent notes show up in legato queries.

		Each match also carries ``start_in_interval`` and ``finish_in_interval``,
		its span clipped to the window.
		"""

		start = cantus.rational.rationalize(closed_interval_start)
		finish = cantus.rational.rationalize(open_interval_finish)

		matches = [
			entry for entry in self._index
			if (entry.start <= start and entry.finish >= start)
			or (entry.start < finish and entry.finish >= finish)
			or (entry.start >= start and entry.finish < finish)
		]

		return IntervalQuery(_match(entry, start, finish) for entry in sorted(matches, key=lambda entry: entry.start))


	def changes_between (self, closed_interval_start: cantus.rational.RationalLike, open_interval_finish: cantus.rational.RationalLike) -> IntervalQuery:

		"""
		Starts and finishes of entries that happen inside a window, in time order.

		An entry starting in ``[closed_interval_start, open_interval_finish)``
		gives a ``"start"`` change and one finishing in
		``(closed_interval_start, open_interval_finish]`` a ``"finish"`` change.
		At equal times starts come before finishes.
		"""

		start = cantus.rational.rationalize(closed_interval_start)
		finish = cantus.rational.rationalize(open_interval_finish)

		changes = [
			_change(entry, start, finish, "start", entry.start)
			for entry in self._index
			if start <= entry.start < finish
		]

		changes.extend(
			_change(entry, start, finish, "finish", entry.finish)
			for entry in self._index
			if start < entry.finish <= finish
		)

		return IntervalQuery(sorted(changes, key=lambda change: change.time))


	def finish (self) -> typing.Optional[fractions.Fraction]:

		"""Latest indexed finish, or ``None`` when empty."""

		if not self._index:
			return None

		return max(entry.finish for entry in self._index)


	@property
	def duration (self) -> fractions.Fraction:

		"""Span the score occupies when nested: its finish, or 0 when empty."""

		finish = self.finish()

		return finish if finish is not None else fractions.Fraction(0)


	def values_of (self, attribute: str) -> typing.Set[typing.Any]:

		"""Distinct values of ``attribute`` across all leaf datasets."""

		return {
			_attribute_of(dataset, attribute)
			for slot in self._slots.values()
			for dataset in slot
			if isinstance(dataset, cantus.datasets.Abs)
		}


	def subset (self, predicate: typing.Callable[[cantus.datasets.Dataset], bool]) -> "Score":

		"""
		A new score with only the datasets satisfying ``predicate``, at the same times.
		"""

		filtered = Score(self._resolution)

		for time, slot in self.each():
			for dataset in slot:
				if predicate(dataset):
					filtered.at(time, dataset)

		return filtered


	def dump (self) -> typing.List[typing.Dict[str, typing.Any]]:

		"""
		Plain-data view: ``[{"time": "n/d", "entries": [...]}, ...]``.
		"""

		return [
			{
				"time": cantus.rational.format_time(time),
				"entries": [_dump_dataset(dataset) for dataset in slot],
			}
			for time, slot in self.each()
		]


	def __repr__ (self) -> str:

		return f"Score(resolution={self._resolution}, slots={len(self)}, entries={len(self._index)})"


def _match (entry: IntervalEntry, start: fractions.Fraction, finish: fractions.Fraction) -> IntervalMatch:

	"""Copy of an index record with its span clipped to a window."""

	return IntervalMatch(
		start=entry.start,
		finish=entry.finish,
		dataset=entry.dataset,
		start_in_interval=max(entry.start, start),
		finish_in_interval=min(entry.finish, finish),
	)


def _change (entry: IntervalEntry, start: fractions.Fraction, finish: fractions.Fraction, change: str, time: fractions.Fraction) -> Change:

	return Change(
		start=entry.start,
		finish=entry.finish,
		dataset=entry.dataset,
		start_in_interval=max(entry.start, start),
		finish_in_interval=min(entry.finish, finish),
		change=change,
		time=time,
		time_in_interval=min(max(time, start), finish),
	)


def _dump_dataset (dataset: cantus.datasets.Dataset) -> typing.Any:

	"""Plain-data view of one slot entry."""

	if isinstance(dataset, Score):
		return {"resolution": cantus.rational.format_time(dataset.resolution), "score": dataset.dump()}

	if isinstance(dataset, cantus.datasets.Abs):
		return dataset.as_dict()

	return repr(dataset)
