"""
clasp command layer: build, compose, and run command definitions.

What this module provides
- Command: immutable tree node describing one command
  • identity and display metadata (name, bin_name, display_name, version, author, about).
  • ordered Arg definitions, always seeded with the implicit -h/--help and
    -V/--version flags ahead of the caller's Args.
  • ordered child Commands (subcommands), each exclusively owned by its parent.
  • help/version templates.
- Entry points
  • try_get_matches_from(argv): pure parse returning a tagged outcome
    (Matched / Failed / Displayed); never prints, never exits.
  • get_matches_from(argv) / get_matches(): the thin process wrapper; prints
    help/version/errors through rich and raises SystemExit when parsing does not
    produce matches.

Quick start
    from clasp import Arg, ArgAction, Command

    cli = Command(
        "tool",
        version="1.0",
        about="does things",
        args=[
            Arg("name", long="name", takes_value=True, help="who to greet"),
            Arg("verbose", "v", action=ArgAction.INCREMENT),
            Arg("file", required=True),
        ],
    )

    matches = cli.get_matches_from(["tool", "--name", "foo", "-vv", "data.txt"])

Design notes
- Attaching a subcommand stamps the child's bin_name (the parent's) and
  subcommand_path (parent path + " " + child name). Stamping happens once, when
  the parent is built, and reaches the whole attached subtree; rendering only
  reads the stored values.
- Duplicate Arg ids, short flags, long flags and subcommand names are rejected
  when a Command is built, so an option token can never match two definitions.
- A Command with subcommands routes on its first token and never matches its
  own Args; declaring positional or required Args on it is therefore rejected.
"""
import copy
import functools
import operator
import re
import sys
from collections.abc import Iterable
from types import MappingProxyType

from .arguments import Arg, help_arg, version_arg
from .faults import trigger
from .outcomes import Matched, Failed, Displayed
from .parser import ArgParser
from .templates import HelpTemplate, DEFAULT_HELP_TEMPLATE, DEFAULT_VERSION_TEMPLATE, render_usage
from .utils import *


class CommandType(type):
    """
    Metaclass providing introspection for Command.

    Responsibilities
    - Expose every name in __introspectable__ as a read-only property (mirror()).
    - Provide stable __repr__/__rich_repr__ implementations using __displayable__.
    - Derive __typename__ ("command") for messages.
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


def _process_strings(cls, metadata):
    """
    Validate and normalize the display scalars.

    - name: required non-empty string without whitespace (it is matched as a token).
    - bin_name/display_name: non-empty strings; default to the name.
    - version/author/about: None or non-empty strings (trimmed).
    - subcommand_path: string, "" for a root command.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not name or re.search(r"\s", name):
        raise ValueError(f"{cls.__typename__} 'name' must be non-empty and cannot contain whitespace")

    for field in ("bin_name", "display_name"):
        if not isinstance(object := metadata[field], str | Unset):
            raise TypeError(f"{cls.__typename__} {field!r} must be a string")
        elif isinstance(object, str) and not (object := object.strip()):
            raise ValueError(f"{cls.__typename__} {field!r} cannot be empty")
        metadata[field] = coalesce(object, name)

    for field in ("version", "author", "about"):
        if not isinstance(object := metadata[field], str | None):
            raise TypeError(f"{cls.__typename__} {field!r} must be a string")
        elif isinstance(object, str) and not (object := object.strip()):
            raise ValueError(f"{cls.__typename__} {field!r} cannot be empty")
        metadata[field] = object

    if not isinstance(metadata["subcommand_path"], str):
        raise TypeError(f"{cls.__typename__} 'subcommand_path' must be a string")


def _process_templates(cls, metadata):
    """
    Accept HelpTemplate instances or raw template strings.
    """
    for field, default in (("help_template", DEFAULT_HELP_TEMPLATE), ("version_template", DEFAULT_VERSION_TEMPLATE)):
        template = coalesce(metadata[field], default)
        if isinstance(template, str):
            template = HelpTemplate(template)
        elif not isinstance(template, HelpTemplate):
            raise TypeError(f"{cls.__typename__} {field!r} must be a string or a help-template")
        metadata[field] = template


def _process_args(cls, metadata):
    """
    Seed the implicit help/version flags and reject ambiguous definitions.

    Rules
    - every element must be an Arg.
    - ids, short flags and long flags are unique across the command, the
      implicit -h/--help and -V/--version included.
    """
    if not isinstance(metadata["args"], Iterable) or isinstance(metadata["args"], str):
        raise TypeError(f"{cls.__typename__} 'args' must be an iterable of args")

    args = [help_arg(), version_arg()]
    for arg in metadata["args"]:
        if not isinstance(arg, Arg):
            raise TypeError(f"{cls.__typename__} 'args' must only contain args")
        args.append(arg)

    ids, shorts, longs = set(), set(), set()
    for arg in args:
        if arg.id in ids:
            raise ValueError(f"{cls.__typename__} {metadata["name"]!r} arg id {arg.id!r} is already in use")
        if arg.short is not None and arg.short in shorts:
            raise ValueError(f"{cls.__typename__} {metadata["name"]!r} short flag '-{arg.short}' is already in use")
        if arg.long is not None and arg.long in longs:
            raise ValueError(f"{cls.__typename__} {metadata["name"]!r} long flag '--{arg.long}' is already in use")
        ids.add(arg.id)
        shorts.add(arg.short)
        longs.add(arg.long)

    metadata["args"] = args


def _process_subcommands(cls, metadata):
    """
    Validate children, then stamp them for this parent.

    Stamping rebuilds each child with bin_name copied from this command and
    subcommand_path = this path + " " + child name; rebuilding a child stamps
    its own children in turn, so the whole subtree is consistent.
    """
    if not isinstance(metadata["subcommands"], Iterable) or isinstance(metadata["subcommands"], str):
        raise TypeError(f"{cls.__typename__} 'subcommands' must be an iterable of commands")

    names = set()
    children = []
    for child in metadata["subcommands"]:
        if not isinstance(child, Command):
            raise TypeError(f"{cls.__typename__} 'subcommands' must only contain commands")
        if child.name in names:
            raise ValueError(f"{cls.__typename__} {metadata["name"]!r} subcommand name {child.name!r} is already in use")
        names.add(child.name)
        children.append(copy.replace(
            child,
            bin_name=metadata["bin_name"],
            subcommand_path=metadata["subcommand_path"] + " " + child.name,
        ))

    if children:
        for arg in metadata["args"]:
            if arg.positional:
                raise ValueError(f"{cls.__typename__} {metadata["name"]!r} has subcommands and cannot declare positional args")
            if arg.required:
                raise ValueError(f"{cls.__typename__} {metadata["name"]!r} has subcommands and cannot declare required args")

    metadata["subcommands"] = children


class Command(metaclass=CommandType):
    """
    Immutable description of a command and its subcommand tree.

    Lifecycle
    - Built by the caller before any parse; read-only while parsing.
    - copy.replace(command, **changes), arg(...) and subcommand(...) return new
      Commands; the original is never modified.

    Notes
    - `args` always starts with the implicit help and version flags.
    - `subcommand_path` is "" for a root command and " a b" for a command
      reached as "prog a b".
    """

    __introspectable__ = (
        "name",
        "bin_name",
        "display_name",
        "version",
        "author",
        "about",
        "subcommand_path",
        "subcommands",
        "args",
        "help_template",
        "version_template",
    )

    __displayable__ = (
        "name",
        "version",
        "about",
        "args",
        "subcommands",
    )

    def __new__(
            cls,
            name,
            /,
            args=(),
            subcommands=(),
            *,
            bin_name=Unset,
            display_name=Unset,
            version=None,
            author=None,
            about=None,
            help_template=Unset,
            version_template=Unset,
            subcommand_path=""
    ):
        """
        Construct a Command.

        Parameters
        - name: str
          Name matched against the first token when this command is a subcommand.
        - args: Iterable[Arg]
          Caller Args in declaration order (the implicit help/version flags are added).
        - subcommands: Iterable[Command]
          Child commands in declaration order.
        - bin_name: str
          Program name shown at the start of usage lines (defaults to name;
          overwritten by the parent's when attached as a subcommand).
        - display_name: str
          Name shown in the help/version heading (defaults to name).
        - version, author, about: None | str
          Help/version metadata.
        - help_template, version_template: str | HelpTemplate
          Templates rendered for --help / --version.
        - subcommand_path: str
          Stamped on attachment; leave it alone for root commands.

        Raises
        - TypeError/ValueError on invalid metadata, duplicate ids/flags/names,
          or positional/required Args on a command with subcommands.
        """
        source = {
            "args": tuple(args) if isinstance(args, Iterable) and not isinstance(args, str) else args,
            "subcommands": tuple(subcommands) if isinstance(subcommands, Iterable) and not isinstance(subcommands, str) else subcommands,
            "bin_name": bin_name,
            "display_name": display_name,
            "version": version,
            "author": author,
            "about": about,
            "help_template": help_template,
            "version_template": version_template,
            "subcommand_path": subcommand_path,
        }
        metadata = {"name": name} | source

        _process_strings(cls, metadata)
        _process_templates(cls, metadata)
        _process_args(cls, metadata)
        _process_subcommands(cls, metadata)

        self = super().__new__(cls)
        for field, object in metadata.items():
            setattr(self, "_" + field, object)
        # Assigned last: it seals the instance (see __setattr__).
        self._source = MappingProxyType({"name": name} | source)
        return self

    def __replace__(self, **changes):
        """
        Build a new Command from this one's construction keywords overridden by `changes`.
        """
        if unknown := changes.keys() - self._source.keys():
            raise TypeError(f"{type(self).__typename__} has no field {sorted(unknown)[0]!r}")
        source = dict(self._source) | changes
        return type(self)(source.pop("name"), **source)

    def __setattr__(self, name, value):
        if not name.startswith("_") or hasattr(self, "_source"):
            raise AttributeError(f"{type(self).__typename__} is immutable")
        super().__setattr__(name, value)

    def arg(self, *args):
        """return a new Command with `args` appended to the caller Args."""
        return self.__replace__(args=(*self._source["args"], *args))

    def subcommand(self, *commands):
        """return a new Command with `commands` attached as subcommands."""
        return self.__replace__(subcommands=(*self._source["subcommands"], *commands))

    def find_subcommand(self, name, /):
        """the child named `name` (declaration order), or None."""
        for child in self._subcommands:
            if child.name == name:
                return child
        return None

    def render_usage(self):
        return render_usage(self)

    def render_help(self):
        return self._help_template.render(self)

    def render_version(self):
        return self._version_template.render(self)

    def try_get_matches_from(self, argv, /):
        """
        Parse `argv` (element zero is the program name) into a tagged outcome.

        Returns
        - Matched(matches) on success.
        - Failed(fault) when a CommandException aborted the parse.
        - Displayed(request) when --help or --version asked for text to be shown.

        Raises
        - TypeError: when argv is not an iterable of strings.
        """
        if isinstance(argv, str) or not isinstance(argv, Iterable):
            raise TypeError("try_get_matches_from() argument must be an iterable of strings")
        argv = list(argv)
        if not all(isinstance(token, str) for token in argv):
            raise TypeError("try_get_matches_from() argument must be an iterable of strings")

        return ArgParser(self, argv).outcome()

    def get_matches_from(self, argv, /, *, colorful=False, fancy=False):
        """
        Parse `argv`; on anything but a match, print and exit.

        Behavior
        - Matched  → return the ArgMatches.
        - Displayed → print the help/version text to stdout, exit with status 0.
        - Failed   → print the rendered fault to stderr, exit with status 2.
        """
        match self.try_get_matches_from(argv):
            case Matched(matches):
                return matches
            case Failed(fault) | Displayed(fault):
                trigger(fault, colorful=colorful, fancy=fancy)

    def get_matches(self, *, colorful=False, fancy=False):
        """get_matches_from() applied to the current process arguments."""
        return self.get_matches_from(sys.argv, colorful=colorful, fancy=fancy)


__all__ = (
    "Command",
)

# Keep the metaclass out of star-imports; it is reachable through type(Command).
del CommandType
