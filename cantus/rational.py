"""Exact rational time values.

Every position and duration in cantus is a :class:`fractions.Fraction`.
Values entering the public API (ints, floats, ``"3/4"`` strings) go through
:func:`rationalize` once, at the boundary, so that no float arithmetic ever
touches a timeline. Tuplets and polyrhythms stay exact no matter how deeply
they are subdivided.
"""

import fractions
import numbers
import typing


RationalLike = typing.Union[fractions.Fraction, int, float, str, numbers.Rational]


def rationalize (value: RationalLike) -> fractions.Fraction:

	"""
	Convert a number or a ``"n/d"`` string into an exact Fraction.

	Floats are converted through their shortest decimal representation, so
	``rationalize(0.1)`` is ``1/10`` rather than the binary approximation.

	Example:
		```python
		rationalize(0.25)     # Fraction(1, 4)
		rationalize("3/4")    # Fraction(3, 4)
		rationalize(2)        # Fraction(2, 1)
		```
	"""

	if isinstance(value, fractions.Fraction):
		return value

	if isinstance(value, bool):
		raise ValueError(f"Cannot use a boolean as a rational time: {value!r}")

	if isinstance(value, numbers.Rational):
		return fractions.Fraction(value.numerator, value.denominator)

	if isinstance(value, float):
		return fractions.Fraction(repr(value))

	if isinstance(value, str):
		try:
			return fractions.Fraction(value.strip())
		except (ValueError, ZeroDivisionError) as exc:
			raise ValueError(f"Not a rational value: {value!r}") from exc

	raise ValueError(f"Cannot rationalize {value!r}")


def format_time (value: fractions.Fraction) -> str:

	"""Format a Fraction as ``"numerator/denominator"``."""

	return f"{value.numerator}/{value.denominator}"
