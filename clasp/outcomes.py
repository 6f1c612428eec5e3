"""
clasp parse outcomes.

A parse ends in exactly one of three ways, each with its own type so callers
never have to guess from text whether something went wrong:

- Matched(matches)   the tokens were accepted; `matches` is an ArgMatches.
- Failed(fault)      a CommandException aborted the parse.
- Displayed(request) --help or --version asked for text to be shown.

All three support structural pattern matching:

    match command.try_get_matches_from(argv):
        case Matched(matches):
            ...
        case Failed(fault):
            ...
        case Displayed(request):
            ...

`text` is the plain text to show ("" for a match) and `exit_code` the status a
process wrapper should exit with (0 for matches and display requests, 2 for faults).
"""
from rich.text import Text

from .faults import CommandException, DisplayRequest
from .matches import ArgMatches


class Matched:
    __slots__ = ("matches",)
    __match_args__ = ("matches",)

    def __init__(self, matches, /):
        if not isinstance(matches, ArgMatches):
            raise TypeError("matched() argument must be an arg-matches")
        self.matches = matches

    @property
    def text(self):
        return ""

    @property
    def exit_code(self):
        return 0

    def __repr__(self):
        return f"matched({self.matches!r})"

    def __rich__(self):
        return Text("")


class Failed:
    __slots__ = ("fault",)
    __match_args__ = ("fault",)

    def __init__(self, fault, /):
        if not isinstance(fault, CommandException):
            raise TypeError("failed() argument must be a command exception")
        self.fault = fault

    @property
    def text(self):
        return str(self.fault)

    @property
    def exit_code(self):
        return self.fault.exit_code

    def __repr__(self):
        return f"failed({type(self.fault).__name__}({self.text!r}))"

    def __rich__(self):
        return self.fault.__rich__()


class Displayed:
    __slots__ = ("request",)
    __match_args__ = ("request",)

    def __init__(self, request, /):
        if not isinstance(request, DisplayRequest):
            raise TypeError("displayed() argument must be a display request")
        self.request = request

    @property
    def text(self):
        return str(self.request)

    @property
    def exit_code(self):
        return self.request.exit_code

    def __repr__(self):
        return f"displayed({type(self.request).__name__}({self.text!r}))"

    def __rich__(self):
        return self.request.__rich__()


__all__ = (
    "Matched",
    "Failed",
    "Displayed",
)
