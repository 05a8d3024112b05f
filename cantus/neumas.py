"""Free functions turning neuma text into raw command mappings.

This is not a grammar: it only splits whitespace-separated neumas and their
dot-separated attributes, which is enough to write phrases by hand::

    "0 +2 +2.1/2.f -1 #phrase-end !cue"

- ``+2.1/2.f`` -> ``{"attributes": ["+2", "1/2", "f"]}``
- ``#text`` -> ``{"comment": "text"}`` (a comment runs to the end of its token)
- ``!cue`` -> ``{"event": "cue"}``
"""

import typing


def to_raw (neuma: str) -> typing.Dict[str, typing.Any]:

	"""
	Convert a single neuma token into a raw command mapping.
	"""

	neuma = neuma.strip()

	if neuma.startswith("#"):
		return {"comment": neuma[1:].strip()}

	if neuma.startswith("!"):
		return {"event": neuma[1:]}

	return {"attributes": neuma.split(".")}


def split (text: str) -> typing.List[typing.Dict[str, typing.Any]]:

	"""
	Split a phrase into raw command mappings, one per whitespace-separated neuma.
	"""

	return [to_raw(token) for token in text.split()]


class DecoderLike (typing.Protocol):

	def decode (self, raw: typing.Any) -> typing.Any:
		...


def decode_all (decoder: DecoderLike, text: str) -> typing.List[typing.Any]:

	"""
	Decode every neuma of a phrase in order, dropping comments.
	"""

	results = []

	for raw in split(text):

		result = decoder.decode(raw)

		if result is not None:
			results.append(result)

	return results
