"""Rational duration constants.

All values are exact :class:`fractions.Fraction` amounts of a **bar**, where
1 = one whole note, so a quarter note is ``1/4``. Use them to seed decoders
and to place entries in a score without float drift::

    import cantus.constants.durations as dur

    decoder = cantus.decoder.GDVDecoder(scale, base_duration=dur.QUARTER)

    # "3 eighth-note triplets" fill exactly one quarter
    assert 3 * dur.TRIPLET_EIGHTH == dur.QUARTER
"""

import fractions


THIRTYSECOND = fractions.Fraction(1, 32)
SIXTEENTH = fractions.Fraction(1, 16)
DOTTED_SIXTEENTH = fractions.Fraction(3, 32)
TRIPLET_EIGHTH = fractions.Fraction(1, 12)
EIGHTH = fractions.Fraction(1, 8)
DOTTED_EIGHTH = fractions.Fraction(3, 16)
TRIPLET_QUARTER = fractions.Fraction(1, 6)
QUARTER = fractions.Fraction(1, 4)
DOTTED_QUARTER = fractions.Fraction(3, 8)
HALF = fractions.Fraction(1, 2)
DOTTED_HALF = fractions.Fraction(3, 4)
WHOLE = fractions.Fraction(1)

# Smallest addressable unit of the default transcription grid (96 ticks per bar).
TICK = fractions.Fraction(1, 96)
