"""Scales for resolving grades to absolute degrees and MIDI pitches.

The decoder only needs ``note_of()``: it turns a grade symbol (``"V"``) or a
plain integer into an absolute scale degree. ``pitch_of()`` is used when a
decoded state is projected onto MIDI.

Grades are zero-based and unbounded: in a seven-note scale grade 7 is the
tonic one octave up and grade -1 the leading tone one octave down.
"""

import typing


NOTE_NAME_TO_PC: typing.Dict[str, int] = {
	"C": 0,
	"C#": 1,
	"Db": 1,
	"D": 2,
	"D#": 3,
	"Eb": 3,
	"E": 4,
	"F": 5,
	"F#": 6,
	"Gb": 6,
	"G": 7,
	"G#": 8,
	"Ab": 8,
	"A": 9,
	"A#": 10,
	"Bb": 10,
	"B": 11,
}


MODE_OFFSETS: typing.Dict[str, typing.List[int]] = {
	"major": [0, 2, 4, 5, 7, 9, 11],
	"minor": [0, 2, 3, 5, 7, 8, 10],
	"dorian": [0, 2, 3, 5, 7, 9, 10],
	"phrygian": [0, 1, 3, 5, 7, 8, 10],
	"lydian": [0, 2, 4, 6, 7, 9, 11],
	"mixolydian": [0, 2, 4, 5, 7, 9, 10],
	"locrian": [0, 1, 3, 5, 6, 8, 10],
	"harmonic_minor": [0, 2, 3, 5, 7, 8, 11],
	"melodic_minor": [0, 2, 3, 5, 7, 9, 11],
	"major_pentatonic": [0, 2, 4, 7, 9],
	"minor_pentatonic": [0, 3, 5, 7, 10],
	"chromatic": [0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11],
}


GRADE_SYMBOLS: typing.Dict[str, int] = {
	"I": 0,
	"II": 1,
	"III": 2,
	"IV": 3,
	"V": 4,
	"VI": 5,
	"VII": 6,
	"VIII": 7,
	"IX": 8,
	"X": 9,
	"XI": 10,
}


def key_name_to_pc (key_name: str) -> int:

	"""
	Validate a key name and return its pitch class (0-11).
	"""

	if key_name not in NOTE_NAME_TO_PC:
		raise ValueError(f"Unknown key name: {key_name!r}. Expected one of {sorted(NOTE_NAME_TO_PC)}")

	return NOTE_NAME_TO_PC[key_name]


class Scale:

	"""
	A scale rooted on a key, resolving grades to degrees and MIDI pitches.
	"""

	def __init__ (self, key: str = "C", mode: str = "major", base_octave: int = 4) -> None:

		"""
		Create a scale.

		Parameters:
			key: Tonic name (``"C"``, ``"F#"``, ``"Bb"``).
			mode: Mode name, one of ``MODE_OFFSETS``.
			base_octave: MIDI octave of grade 0 (``4`` puts C on 60).
		"""

		if mode not in MODE_OFFSETS:
			raise ValueError(f"Unknown mode: {mode!r}. Expected one of {sorted(MODE_OFFSETS)}")

		self.key = key
		self.mode = mode
		self.base_octave = base_octave

		self.offsets = MODE_OFFSETS[mode]
		self.tonic = 12 * (base_octave + 1) + key_name_to_pc(key)


	@property
	def number_of_grades (self) -> int:

		return len(self.offsets)


	def note_of (self, grade: typing.Union[int, str]) -> int:

		"""
		Resolve a grade symbol or integer to an absolute scale degree.

		Accepts integers, integer strings (``"-2"``) and the symbols
		``I`` to ``XI``.
		"""

		if isinstance(grade, bool):
			raise ValueError(f"Not a grade: {grade!r}")

		if isinstance(grade, int):
			return grade

		if isinstance(grade, str):

			if grade in GRADE_SYMBOLS:
				return GRADE_SYMBOLS[grade]

			try:
				return int(grade)
			except ValueError:
				pass

		raise ValueError(f"Unknown grade: {grade!r}")


	def pitch_of (self, grade: int, octave: int = 0) -> int:

		"""
		Return the MIDI note number of a grade, shifted by whole octaves.
		"""

		octaves, index = divmod(grade, self.number_of_grades)

		return self.tonic + self.offsets[index] + 12 * (octaves + octave)


	def normalize (self, grade: int, sharps: int) -> typing.Tuple[int, int]:

		"""
		Fold an altered grade back onto the scale when it lands on a degree.

		``(2, 1)`` in C major (E sharp) is F, so it becomes ``(3, 0)``. An
		alteration that falls between degrees is kept as it is.
		"""

		if sharps == 0:
			return grade, 0

		octaves, offset = divmod(self.pitch_of(grade) + sharps - self.tonic, 12)

		if offset in self.offsets:
			return octaves * self.number_of_grades + self.offsets.index(offset), 0

		return grade, sharps


	def __repr__ (self) -> str:

		return f"Scale(key={self.key!r}, mode={self.mode!r}, base_octave={self.base_octave})"
