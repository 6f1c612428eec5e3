"""
clasp help/version templates.

A HelpTemplate is a plain placeholder-substitution pass over a template string.
Recognized placeholders (absent metadata substitutes an empty string):

    {name-version}          display name, then " <version>" when a version is set
    {author-with-newline}   author followed by a newline
    {about-with-newline}    about followed by a newline
    {usage}                 synthesized usage line (without the "USAGE:" heading)
    {all-args}              ARGS / OPTIONS / SUBCOMMANDS sections

Any other "{...}" sequence is left untouched.

Usage line, in fixed order
- bin name + subcommand path
- " [OPTIONS]" iff the command has optional Args
- each positional display form in declaration order ("<id>" / "[id]", "..." when multiple)
- " [SUBCOMMAND]" iff the command has subcommands

All-args block
- "ARGS:", "OPTIONS:", "SUBCOMMANDS:" in that order, empty sections omitted,
  sections separated by a blank line.
- entries keep declaration order, are indented by four spaces and padded to
  COLUMN characters (or the entry width plus two) before their help text.
"""
import re

INDENT = " " * 4
COLUMN = 20

DEFAULT_HELP_TEMPLATE = "{name-version}\n{author-with-newline}{about-with-newline}\nUSAGE:\n    {usage}\n\n{all-args}"
DEFAULT_VERSION_TEMPLATE = "{name-version}"


def render_usage(command, /):
    """synthesized usage line of `command` (no heading, no indentation)."""
    parts = [command.bin_name + command.subcommand_path]
    if any(arg.optional for arg in command.args):
        parts.append("[OPTIONS]")
    parts.extend(arg.display for arg in command.args if arg.positional)
    if command.subcommands:
        parts.append("[SUBCOMMAND]")
    return " ".join(parts)


def _option_entry(arg):
    # "-s, --long", "    --long" (aligned with short forms) or "-s"
    if arg.short is not None and arg.long is not None:
        entry = "-%s, --%s" % (arg.short, arg.long)
    elif arg.long is not None:
        entry = "    --%s" % arg.long
    else:
        entry = "-%s" % arg.short
    if arg.takes_value:
        entry += " " + arg.placeholder + "..." * arg.multiple_values
    return entry


def _line(entry, help):
    if not help:
        return INDENT + entry
    return INDENT + entry.ljust(max(COLUMN, len(entry) + 2)) + help


def render_all_args(command, /):
    """the ARGS / OPTIONS / SUBCOMMANDS block of `command`."""
    sections = []

    if positionals := [arg for arg in command.args if arg.positional]:
        sections.append("ARGS:\n" + "\n".join(_line(arg.display, arg.help) for arg in positionals))

    if options := [arg for arg in command.args if arg.optional]:
        sections.append("OPTIONS:\n" + "\n".join(_line(_option_entry(arg), arg.help) for arg in options))

    if command.subcommands:
        sections.append("SUBCOMMANDS:\n" + "\n".join(_line(child.name, child.about) for child in command.subcommands))

    return "\n\n".join(sections)


class HelpTemplate:
    """
    Placeholder-substitution renderer.

    Parameters
    - source: str
      Template text; see the module docstring for the placeholders.
    """

    __slots__ = ("_source",)

    _placeholder = re.compile(r"\{([a-z][a-z-]*)\}")

    def __init__(self, source=DEFAULT_HELP_TEMPLATE, /):
        if not isinstance(source, str):
            raise TypeError("help-template 'source' must be a string")
        self._source = source

    @property
    def source(self):
        return self._source

    def __repr__(self):
        return f"help-template({self._source!r})"

    def __eq__(self, other):
        if not isinstance(other, HelpTemplate):
            return NotImplemented
        return self._source == other._source

    def __hash__(self):
        return hash(self._source)

    def render(self, command, /):
        """render the template against `command`'s metadata."""
        renderers = {
            "name-version": lambda: command.display_name + (" " + command.version if command.version else ""),
            "author-with-newline": lambda: command.author + "\n" if command.author else "",
            "about-with-newline": lambda: command.about + "\n" if command.about else "",
            "usage": lambda: render_usage(command),
            "all-args": lambda: render_all_args(command),
        }

        def substitute(match):
            try:
                return renderers[match[1]]()
            except KeyError:
                return match[0]

        return self._placeholder.sub(substitute, self._source)


__all__ = (
    "HelpTemplate",
    "DEFAULT_HELP_TEMPLATE",
    "DEFAULT_VERSION_TEMPLATE",
)
