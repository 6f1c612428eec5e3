"""
clasp faults (parse errors and display requests) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every parse error.
  Codes are grouped by domain to keep copy consistent and make logs/searches
  predictable.
- CommandException: base type of true parse errors. It carries a message plus
  options (title, code, hint, command, ...) and knows how to render itself.
- DisplayRequest: base type of deliberate early exits (help, version). It is
  NOT a CommandException, so `except CommandException` never swallows a
  requested help screen.
- trigger(): central entry point to surface a fault or display request
  (print through rich, then exit with the matching status).
- getdoc(): optional description lookup for a code from the host application.

UX goals
- Soft but technical language: short titles, one-sentence bodies, a single clear hint.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).
- The plain message (str(fault)) stays exactly what the parser produced, so
  callers comparing text never see styling.
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • UNKNOWN_SUBCOMMAND
    - options and positionals (1111x/1112x)
      • UNEXPECTED_ARGUMENT, MISSING_VALUE, MISSING_REQUIRED_ARGS

    rationale
    - codes are discoverable (searchable in logs and docs) and normalized to a string
      via normalize() so hosts can remap them if desired (e.g., to shorter labels).
    """
    # --- routing errors (11xxx) ---
    UNKNOWN_SUBCOMMAND          = 11102

    # --- option/positional errors (11xxx) ---
    UNEXPECTED_ARGUMENT         = 11112
    MISSING_VALUE               = 11117
    MISSING_REQUIRED_ARGS       = 11125

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _palette(defaults):
    """merge the default palette with the host overrides in __main__.__styles__."""
    return defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))


class CommandException(Exception):
    """
    a true parse error.

    the message is the plain diagnostic text; options carry the context used for
    rendering (title, code, hint, command, input, argument, colorful, fancy).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message if self.message is not Unset else ""

    @property
    def code(self):
        return self.options.get("code")

    @property
    def exit_code(self):
        return 2

    def __rich__(self):
        styles = _palette({
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        })
        colorful = self.options.get("colorful", False)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment if colorful else Text(fragment.plain)
            return Text(str(fragment), style)

        command = self.options.get("command")
        prog = text(getattr(__import__("__main__"), "__prog__", getattr(command, "bin_name", "")), styler("prog-name"))

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(self.code.normalize() if self.code else "", styler("code")),
            " | ",
            text(self.options.get("title", "error").title(), styler("error-title")),
            " ]"
        )
        message = text(str(self), styler("error-message"))

        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self):
        console.print(self, highlight=False)
        sys.exit(self.exit_code)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnexpectedArgumentError(CommandException): ...
class MissingValueError(CommandException): ...
class MissingRequiredArgsError(CommandException): ...
class UnknownSubcommandError(CommandException): ...


class DisplayRequest(Exception):
    """
    a deliberate early exit carrying text to show (help or version).

    it travels through the parser like an error (aborting the fold) but is a
    separate hierarchy: callers tell it apart by type, never by content.
    """

    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    @property
    def exit_code(self):
        return 0

    def __rich__(self):
        # Help and version text are laid out by the template; print it verbatim.
        return Text(self.message)

    def __trigger__(self):
        Console().print(self, highlight=False, markup=False, soft_wrap=True)
        sys.exit(self.exit_code)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class HelpRequested(DisplayRequest): ...
class VersionRequested(DisplayRequest): ...


def trigger(fault, /, **options):
    """
    surface a fault or display request with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - errors are printed to stderr and exit with status 2; display requests are
      printed to stdout and exit with status 0.

    typical options
    - command, colorful, fancy, title, code, hint, docs.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    lookup
    - the host application may expose a __docs__ mapping in __main__ where keys
      are FaultCode instances and values are short documentation strings.
    - when not found, returns None (renderers treat docs as optional).
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "CommandException",
    "UnexpectedArgumentError",
    "MissingValueError",
    "MissingRequiredArgsError",
    "UnknownSubcommandError",
    "DisplayRequest",
    "HelpRequested",
    "VersionRequested",
    "FaultCode",
    "trigger",
    "getdoc",
)
