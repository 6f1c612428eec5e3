"""
clasp parse results.

ArgMatches is what a successful parse hands back: a read-only mapping from Arg
id to the tuple of strings recorded for it, plus an optional nested
(subcommand name, ArgMatches) pair.

Recording rules (enforced by the parser, relied upon here)
- an id maps to at least one value; an empty recording is never stored, absence
  means "nothing recorded and no default".
- values keep encounter order.
- flags record "true"/"false", counters record the count in decimal.

Accessors
- get_one(id)      → first recorded value, or None.
- get_many(id)     → tuple of recorded values, or None.
- get_flag(id)     → True iff the single recorded value is "true".
- get_count(id)    → recorded count as int (0 when absent).
- contains_id(id)  → whether anything was recorded.
- subcommand, subcommand_name, subcommand_matches(name).
"""
from collections.abc import Mapping
from types import MappingProxyType


class ArgMatches(Mapping):
    """
    Immutable result of one parse.

    Construction is done by the parser once the fold over the tokens finished
    without error; nothing mutates an ArgMatches afterwards.
    """

    __slots__ = ("_values", "_subcommand")

    def __init__(self, values=(), /, subcommand=None):
        values = dict(values)
        for id, recorded in values.items():
            if not isinstance(id, str):
                raise TypeError("arg-matches ids must be strings")
            if isinstance(recorded, str) or not all(isinstance(value, str) for value in recorded):
                raise TypeError("arg-matches values must be sequences of strings")
            if not recorded:
                raise ValueError(f"arg-matches cannot record an empty value list for {id!r}")
        if subcommand is not None:
            name, matches = subcommand
            if not isinstance(name, str) or not isinstance(matches, ArgMatches):
                raise TypeError("arg-matches 'subcommand' must be a (name, arg-matches) pair")
            subcommand = (name, matches)
        self._values = MappingProxyType({id: tuple(recorded) for id, recorded in values.items()})
        self._subcommand = subcommand

    def __getitem__(self, id):
        return self._values[id]

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __eq__(self, other):
        if not isinstance(other, ArgMatches):
            return NotImplemented
        return dict(self._values) == dict(other._values) and self._subcommand == other._subcommand

    __hash__ = None

    def __repr__(self):
        return f"arg-matches({dict(self._values)!r}, subcommand={self._subcommand!r})"

    def __rich_repr__(self):
        yield "values", dict(self._values)
        yield "subcommand", self._subcommand

    def ids(self):
        """ids with a recorded entry, in recording order."""
        return tuple(self._values)

    def contains_id(self, id, /):
        return id in self._values

    def get_one(self, id, /):
        try:
            return self._values[id][0]
        except KeyError:
            return None

    def get_many(self, id, /):
        return self._values.get(id)

    def get_flag(self, id, /):
        return self._values.get(id) == ("true",)

    def get_count(self, id, /):
        """
        recorded count of an incrementing argument.

        Raises
        - ValueError: when the recorded value is not a decimal count.
        """
        try:
            value, = self._values[id]
        except KeyError:
            return 0
        except ValueError:
            raise ValueError(f"arg-matches {id!r} holds several values, not a count") from None
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"arg-matches {id!r} holds {value!r}, not a count") from None

    @property
    def subcommand(self):
        """(name, ArgMatches) of the dispatched subcommand, or None."""
        return self._subcommand

    @property
    def subcommand_name(self):
        return self._subcommand[0] if self._subcommand else None

    def subcommand_matches(self, name, /):
        """nested matches when `name` is the dispatched subcommand, else None."""
        if self._subcommand and self._subcommand[0] == name:
            return self._subcommand[1]
        return None


__all__ = (
    "ArgMatches",
)
