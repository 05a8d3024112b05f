"""Dynamic mark constants.

Velocity inside an absolute state is a small signed integer level rather than
a raw MIDI value. ``mp`` (and its alias ``mf``) is level 0, each ``p`` below
it subtracts one and each ``f`` above it adds one.

The MIDI projection indexes ``MIDI_VELOCITIES`` with ``level + 3``, skipping
the ``mf`` slot for levels above ``mp``: ``p`` is 48, ``mp`` 64, ``f`` 96 and
``fff`` 127.
"""

import typing


DYNAMICS: typing.Dict[str, int] = {
	"ppp": -3,
	"pp": -2,
	"p": -1,
	"mp": 0,
	"mf": 0,
	"f": 1,
	"ff": 2,
	"fff": 3,
}

DEFAULT_LEVEL = 0

# ppp = 16 ... mp = 64, (mf = 80), f = 96 ... fff = 127
MIDI_VELOCITIES: typing.List[int] = [16, 32, 48, 64, 80, 96, 112, 127]
MIDI_VELOCITY_OFFSET = 3
