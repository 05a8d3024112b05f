"""Constants for cantus.

This package contains two sets of constants:

- ``cantus.constants.durations`` - Rational note durations, measured in bars (1 = whole note)
- ``cantus.constants.velocity`` - The dynamic mark scale and its MIDI velocity table
"""
