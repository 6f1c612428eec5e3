"""
clasp parsing engine.

ArgParser turns one Command plus one raw argument vector into ArgMatches. It is
created fresh for every parse, owns all of its working state, and is discarded
afterwards; nothing it does is visible outside the returned value or raised fault.

State
- definitions: the command's Args in declaration order (never modified).
- consumed: indices of definitions that are used up; the "remaining pool" is
  every definition whose index is not in this set, still in declaration order.
- inputs: deque of tokens not yet consumed (element zero of argv already dropped).
- values: id → list of recorded strings, under construction.
- positional_only: set once "--" was seen.

Loop (until inputs is empty; every step consumes at least one token)
1. positional_only → positional token.
2. "--"            → consume it, switch to positional_only.
3. leading "-"     → option token: consumed, then matched exactly against
                     the "-x"/"--name" forms of the remaining options.
4. otherwise       → positional token: handed to the first remaining positional,
                     whose action consumes it as its value.

Post-processing (only when the loop finished)
- every required Arg without an entry is reported in one fault.
- every Arg with a default and without an entry records its default.

Subcommand routing
- a command with subcommands never enters the loop: its first token must name a
  child, which parses the rest of the tokens recursively; the nested result is
  stored as (child name, child matches).
"""
import difflib
from collections import deque

from .arguments import ArgAction
from .faults import *
from .matches import ArgMatches
from .outcomes import Matched, Failed, Displayed


class ArgParser:
    """
    Single-use parsing engine for one command.

    Usage
        outcome = ArgParser(command, argv).outcome()  # tagged result
        matches = ArgParser(command, argv).run()      # raises on faults/display
    """

    def __init__(self, command, argv, /):
        self.command = command
        self.definitions = command.args
        self.consumed = set()
        # Element zero is the program (or subcommand) name.
        self.inputs = deque(argv[1:])
        self.values = {}
        self.positional_only = False

    @property
    def route(self):
        return self.command.bin_name + self.command.subcommand_path

    def outcome(self):
        """run the parse and fold its result into Matched / Failed / Displayed."""
        try:
            return Matched(self.run())
        except CommandException as fault:
            return Failed(fault)
        except DisplayRequest as request:
            return Displayed(request)

    def run(self):
        """
        parse every input token and return the frozen ArgMatches.

        Raises
        - CommandException subclasses on the first parse error.
        - HelpRequested / VersionRequested when a help or version flag is matched.
        """
        if self.command.subcommands:
            return self._dispatch()

        while self.inputs:
            token = self.inputs[0]
            if self.positional_only:
                self._parse_positional(token)
            elif token == "--":
                self.inputs.popleft()
                self.positional_only = True
            elif token.startswith("-"):
                self.inputs.popleft()
                self._parse_option(token)
            else:
                self._parse_positional(token)

        self._check_required()
        self._apply_defaults()
        return ArgMatches(self.values)

    def _remaining(self, *, positional):
        for index, arg in enumerate(self.definitions):
            if index not in self.consumed and arg.positional is positional:
                yield index, arg

    def _parse_option(self, token):
        """match an already-consumed option token against the remaining options."""
        for index, arg in self._remaining(positional=False):
            if arg.selected_by(token):
                break
        else:
            suggestions = difflib.get_close_matches(
                token, [flag for _, arg in self._remaining(positional=False) for flag in arg.flags], 1
            )
            try:
                hint = "did you mean %r? you can also run '%s --help' to see all options" % (suggestions[0], self.route)
            except IndexError:
                hint = "run '%s --help' to see all available options" % self.route
            raise UnexpectedArgumentError(
                "unexpected argument %r found" % token,
                title="unexpected argument",
                code=FaultCode.UNEXPECTED_ARGUMENT,
                command=self.command,
                input=token,
                hint=hint,
                docs=getdoc(FaultCode.UNEXPECTED_ARGUMENT),
            )

        self._perform(arg)
        if not (arg.multiple_values or arg.action is ArgAction.INCREMENT):
            self.consumed.add(index)

    def _parse_positional(self, token):
        """hand a positional token (still in inputs) to the earliest remaining positional."""
        try:
            index, arg = next(self._remaining(positional=True))
        except StopIteration:
            raise UnexpectedArgumentError(
                "unexpected argument %r found" % token,
                title="unexpected argument",
                code=FaultCode.UNEXPECTED_ARGUMENT,
                command=self.command,
                input=token,
                hint="remove this extra value or run '%s --help' to see the expected usage" % self.route,
                docs=getdoc(FaultCode.UNEXPECTED_ARGUMENT),
            ) from None

        self._perform(arg)
        if not arg.multiple_values:
            self.consumed.add(index)

    def _take(self, arg):
        """consume the next input token as the value of `arg`."""
        try:
            return self.inputs.popleft()
        except IndexError:
            raise MissingValueError(
                "argument %r requires a value but none was supplied" % arg.display,
                title="missing value",
                code=FaultCode.MISSING_VALUE,
                command=self.command,
                argument=arg,
                hint="pass a value after %s" % arg.flags[-1] if arg.optional else "pass a value for %s" % arg.display,
                docs=getdoc(FaultCode.MISSING_VALUE),
            ) from None

    def _perform(self, arg):
        """apply the action of a matched `arg` to the recorded values."""
        match arg.action:
            case ArgAction.SET:
                self.values[arg.id] = [self._take(arg)]
            case ArgAction.APPEND:
                self.values.setdefault(arg.id, []).append(self._take(arg))
            case ArgAction.SET_TRUE:
                self.values[arg.id] = ["true"]
            case ArgAction.SET_FALSE:
                self.values[arg.id] = ["false"]
            case ArgAction.INCREMENT:
                match self.values.get(arg.id):
                    case [value]:
                        try:
                            count = int(value)
                        except ValueError:
                            count = 0
                        self.values[arg.id] = [str(count + 1)]
                    case _:
                        self.values[arg.id] = ["1"]
            case ArgAction.HELP:
                raise HelpRequested(self.command.render_help(), command=self.command)
            case ArgAction.VERSION:
                raise VersionRequested(self.command.render_version(), command=self.command)

    def _check_required(self):
        if missing := [arg for arg in self.definitions if arg.required and arg.id not in self.values]:
            raise MissingRequiredArgsError(
                "the following required arguments were not provided:" + "".join(
                    "\n    " + arg.display for arg in missing
                ),
                title="missing required arguments",
                code=FaultCode.MISSING_REQUIRED_ARGS,
                command=self.command,
                missing=tuple(missing),
                hint="run '%s --help' to see the expected usage" % self.route,
                docs=getdoc(FaultCode.MISSING_REQUIRED_ARGS),
            )

    def _apply_defaults(self):
        for arg in self.definitions:
            if arg.default_value is not None and arg.id not in self.values:
                self.values[arg.id] = [arg.default_value]

    def _dispatch(self):
        """route on the first token to a subcommand and nest its matches."""
        try:
            name = self.inputs[0]
        except IndexError:
            name = None
            hint = "pass one of the subcommands listed above"
        else:
            if (child := self.command.find_subcommand(name)) is not None:
                return ArgMatches({}, subcommand=(child.name, ArgParser(child, list(self.inputs)).run()))
            suggestions = difflib.get_close_matches(name, [child.name for child in self.command.subcommands], 1)
            try:
                hint = "did you mean %r? the subcommands are listed above" % suggestions[0]
            except IndexError:
                hint = "pass one of the subcommands listed above"

        raise UnknownSubcommandError(
            self.command.render_help(),
            title="unknown subcommand" if name is not None else "missing subcommand",
            code=FaultCode.UNKNOWN_SUBCOMMAND,
            command=self.command,
            input=name,
            hint=hint,
            docs=getdoc(FaultCode.UNKNOWN_SUBCOMMAND),
        )


__all__ = (
    "ArgParser",
)
