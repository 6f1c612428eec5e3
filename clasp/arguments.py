r"""
clasp argument definitions.

Overview
- ArgAction: closed enumeration of what happens when an argument is matched
  (SET, APPEND, SET_TRUE, SET_FALSE, INCREMENT, HELP, VERSION).
- Arg: immutable description of one argument. An Arg without `short` and `long`
  is a positional; an Arg with either is an option (optional argument).

Metadata (sanitized on construction)
- id: non-empty string, the key the parse result is recorded under.
- short: None | single character (rendered as "-x"), never "-" nor whitespace.
- long: None | non-empty string (rendered as "--name"), no leading "-" nor whitespace.
- required / takes_value / multiple_values: bool.
- default_value: None | str (an explicit "" is a real default).
- value_name / help: None | non-empty str (display only).
- action: Unset | ArgAction.

Action wiring (independent of keyword order)
- multiple_values=True implies takes_value=True and action=APPEND.
- takes_value=True implies action=SET.
- action=SET implies takes_value; action=APPEND implies takes_value and multiple_values.
- otherwise options default to SET_TRUE and positionals to SET.
- a positional always takes a value; any other action on it is rejected.

Immutability
- Every field is exposed as a read-only property.
- copy.replace(arg, **changes) builds a new Arg from the keywords the original
  was built with, overridden by `changes`, and runs the same sanitization.

Quick example:
    >>> from clasp.arguments import Arg, ArgAction
    >>> name = Arg("name", long="name", takes_value=True)
    >>> name.action is ArgAction.SET
    True
    >>> Arg("file", required=True).display
    '<file>'
"""
import functools
import operator
import re
from enum import Enum
from types import MappingProxyType

from .utils import *


class ArgAction(Enum):
    """
    closed set of actions applied when an argument is matched.

    the engine dispatches on these members with a `match` statement; adding a
    member means adding a case there.
    """
    SET = "set"
    APPEND = "append"
    SET_TRUE = "set-true"
    SET_FALSE = "set-false"
    INCREMENT = "increment"
    HELP = "help"
    VERSION = "version"

    @property
    def takes_value(self):
        """whether the action reads a value token."""
        return self in (ArgAction.SET, ArgAction.APPEND)

    @property
    def repeatable(self):
        """whether an option carrying this action stays matchable after use."""
        return self in (ArgAction.APPEND, ArgAction.INCREMENT)

    @property
    def terminal(self):
        """whether the action aborts the parse with display text."""
        return self in (ArgAction.HELP, ArgAction.VERSION)


class ArgumentType(type):
    """
    Metaclass giving definitions stable, introspectable shapes.

    Responsibilities
    - Expose every name listed in __introspectable__ as a read-only property
      backed by the private "_{name}" field (see mirror()).
    - Provide __repr__/__rich_repr__ built from __displayable__ (or
      __introspectable__ when unset).
    - Derive __typename__ from the class name for messages ("Arg" -> "arg").
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_identity(cls, metadata, /):
    """
    Internal: validate id/short/long.

    Raises
    - TypeError: wrong types.
    - ValueError: empty id, malformed short/long.
    """
    if not isinstance(id := metadata["id"], str):
        raise TypeError(f"{cls.__typename__} 'id' must be a string")
    elif not (id := id.strip()):
        raise ValueError(f"{cls.__typename__} 'id' cannot be empty")
    metadata["id"] = id

    if not isinstance(short := metadata["short"], str | None):
        raise TypeError(f"{cls.__typename__} 'short' must be a string")
    elif isinstance(short, str) and (len(short) != 1 or short == "-" or short.isspace()):
        raise ValueError(f"{cls.__typename__} 'short' must be a single character other than '-'")

    if not isinstance(long := metadata["long"], str | None):
        raise TypeError(f"{cls.__typename__} 'long' must be a string")
    elif isinstance(long, str) and not re.fullmatch(r"[^\s\-]\S*", long):
        raise ValueError(f"{cls.__typename__} 'long' must be non-empty and cannot start with '-'")


def _sanitize_display(cls, metadata, /):
    """
    Internal: validate default/value_name/help strings.

    default_value may be the empty string (it is a value); value_name and help
    are trimmed and must stay non-empty when provided.
    """
    if not isinstance(metadata["default_value"], str | None):
        raise TypeError(f"{cls.__typename__} 'default_value' must be a string")

    for name in ("value_name", "help"):
        if not isinstance(object := metadata[name], str | None):
            raise TypeError(f"{cls.__typename__} {name!r} must be a string")
        elif isinstance(object, str) and not (object := object.strip()):
            raise ValueError(f"{cls.__typename__} {name!r} cannot be empty")
        metadata[name] = object


def _sanitize_action(cls, metadata, /):
    """
    Internal: resolve takes_value/multiple_values/action into one consistent triple.

    The wiring rules are listed in the module docstring. Conflicting requests
    (e.g. takes_value=True with action=INCREMENT) raise TypeError instead of
    silently picking a winner.
    """
    if not isinstance(action := metadata["action"], ArgAction | Unset):
        raise TypeError(f"{cls.__typename__} 'action' must be an arg-action")

    takes_value = metadata["takes_value"]
    multiple_values = metadata["multiple_values"]
    positional = metadata["short"] is None and metadata["long"] is None

    if action is Unset:
        if multiple_values:
            action = ArgAction.APPEND
        elif takes_value or positional:
            action = ArgAction.SET
        else:
            action = ArgAction.SET_TRUE
    elif multiple_values and action is not ArgAction.APPEND:
        raise TypeError(f"{cls.__typename__} with multiple values must use the append action")
    elif takes_value and not action.takes_value:
        raise TypeError(f"{cls.__typename__} taking a value cannot use the {action.value} action")

    if positional and not action.takes_value:
        raise TypeError(f"positional {cls.__typename__} must take a value (got the {action.value} action)")

    metadata["action"] = action
    metadata["takes_value"] = action.takes_value
    metadata["multiple_values"] = multiple_values or action is ArgAction.APPEND


class Arg(metaclass=ArgumentType):
    """
    Immutable definition of a single command-line argument.

    Classification
    - positional: neither short nor long is set; matched by position.
    - optional: short and/or long is set; matched by "-x" / "--name" tokens.
    Exactly one of the two holds for every Arg.

    Properties
    - The names listed in __introspectable__ are read-only attributes.
    - display: the form used in usage lines and missing-argument listings.
    - flags: the literal tokens that select an optional Arg ("-x", "--name").
    """

    __introspectable__ = (
        "id",
        "short",
        "long",
        "required",
        "takes_value",
        "multiple_values",
        "default_value",
        "value_name",
        "help",
        "action",
    )

    __displayable__ = (
        "id",
        "short",
        "long",
        "required",
        "action",
    )

    def __new__(
            cls,
            id,
            /,
            short=None,
            long=None,
            *,
            required=False,
            takes_value=False,
            multiple_values=False,
            default_value=None,
            value_name=None,
            help=None,
            action=Unset
    ):
        """
        Construct an Arg with the provided metadata.

        Parameters
        - id: str
          Unique key within a Command; the parse result is recorded under it.
        - short: None | str
          Single character, matched as "-<short>".
        - long: None | str
          Name without dashes, matched as "--<long>".
        - required: bool
          Parsing fails when no value was recorded for a required Arg.
        - takes_value: bool
          Shorthand for action=SET.
        - multiple_values: bool
          Shorthand for action=APPEND; the Arg stays matchable after use.
        - default_value: None | str
          Recorded after parsing when nothing else was.
        - value_name: None | str
          Placeholder shown in help (defaults to the upper-cased id).
        - help: None | str
          One-line description shown in help.
        - action: Unset | ArgAction
          Explicit action; see the module docstring for the wiring rules.
        """
        source = {
            "short": short,
            "long": long,
            "required": required,
            "takes_value": takes_value,
            "multiple_values": multiple_values,
            "default_value": default_value,
            "value_name": value_name,
            "help": help,
            "action": action,
        }
        metadata = {
            "id": id,
            "short": short,
            "long": long,
            "required": bool(required),
            "takes_value": bool(takes_value),
            "multiple_values": bool(multiple_values),
            "default_value": default_value,
            "value_name": value_name,
            "help": help,
            "action": action,
        }
        _sanitize_identity(cls, metadata)
        _sanitize_display(cls, metadata)
        _sanitize_action(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        # Keywords as given, so copy.replace() can re-derive the action wiring.
        # Assigned last: it seals the instance (see __setattr__).
        self._source = MappingProxyType({"id": metadata["id"]} | source)
        return self

    def __replace__(self, **changes):
        """
        Build a new Arg from this one's construction keywords overridden by `changes`.
        """
        if unknown := changes.keys() - self._source.keys():
            raise TypeError(f"{type(self).__typename__} has no field {sorted(unknown)[0]!r}")
        source = dict(self._source) | changes
        return type(self)(source.pop("id"), **source)

    def __setattr__(self, name, value):
        if not name.startswith("_") or hasattr(self, "_source"):
            raise AttributeError(f"{type(self).__typename__} is immutable")
        super().__setattr__(name, value)

    @property
    def positional(self):
        """True iff neither short nor long is set."""
        return self._short is None and self._long is None

    @property
    def optional(self):
        """True iff short or long is set (the complement of positional)."""
        return not self.positional

    @property
    def flags(self):
        """literal tokens selecting this option, short form first."""
        flags = []
        if self._short is not None:
            flags.append("-" + self._short)
        if self._long is not None:
            flags.append("--" + self._long)
        return tuple(flags)

    @property
    def placeholder(self):
        """value placeholder shown after an option, e.g. '<NAME>'."""
        return "<%s>" % (self._value_name or self._id.upper())

    @property
    def display(self):
        """
        form used in usage lines and required-argument listings.

        - positional: '<id>' when required, '[id]' otherwise, '...' when multiple.
        - option: the long flag when present, else the short one, followed by
          the placeholder when the option takes a value.
        """
        if self.positional:
            display = ("<%s>" if self._required else "[%s]") % self._id
            return display + "..." * self._multiple_values
        display = self.flags[-1]
        if self._takes_value:
            display += " " + self.placeholder
        return display

    def selected_by(self, token, /):
        """whether `token` selects this option (exact match, no prefixes)."""
        return token in self.flags


def help_arg():
    """the implicit -h/--help definition seeded into every Command."""
    return Arg("help", "h", "help", help="Print help information", action=ArgAction.HELP)


def version_arg():
    """the implicit -V/--version definition seeded into every Command."""
    return Arg("version", "V", "version", help="Print version information", action=ArgAction.VERSION)


__all__ = (
    # Classes
    "Arg",
    "ArgAction",
)

# Keep the metaclass out of star-imports; it is reachable through type(Arg).
del ArgumentType
