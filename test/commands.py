"""
Commands module behavioral tests (building, composition, help, process wrapper).

Scope
- Validate Command construction: implicit help/version flags, metadata checks.
- Validate build-time rejection of ambiguous definitions.
- Validate subcommand stamping (bin_name and subcommand_path) across a tree.
- Validate help/version/usage rendering of the default templates.
- Validate get_matches_from printing and exit statuses.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (Command, Arg, ArgAction, HelpTemplate).
"""

from __future__ import annotations

import copy
import io
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest import TestCase

from clasp import Arg, ArgAction, Command, HelpTemplate


class TestCommandConstruction(TestCase):
    """Metadata validation and the implicit flags."""

    def testImplicitFlagsComeFirst(self):
        command = Command("prog", args=[Arg("file")])
        self.assertEqual([arg.id for arg in command.args], ["help", "version", "file"])
        self.assertIs(command.args[0].action, ArgAction.HELP)
        self.assertIs(command.args[1].action, ArgAction.VERSION)

    def testNamesDefaultToName(self):
        command = Command("prog")
        self.assertEqual(command.bin_name, "prog")
        self.assertEqual(command.display_name, "prog")
        self.assertEqual(command.subcommand_path, "")

    def testNameMustBeString(self):
        with self.assertRaises(TypeError):
            Command(None)

    def testNameCannotContainWhitespace(self):
        with self.assertRaises(ValueError):
            Command("my prog")
        with self.assertRaises(ValueError):
            Command("")

    def testMetadataIsTrimmed(self):
        command = Command("prog", about="  does things  ", author=" Jane ")
        self.assertEqual(command.about, "does things")
        self.assertEqual(command.author, "Jane")

    def testEmptyMetadataRejected(self):
        with self.assertRaises(ValueError):
            Command("prog", version=" ")

    def testArgsMustBeArgs(self):
        with self.assertRaises(TypeError):
            Command("prog", args=["file"])
        with self.assertRaises(TypeError):
            Command("prog", args="file")

    def testSubcommandsMustBeCommands(self):
        with self.assertRaises(TypeError):
            Command("prog", subcommands=["run"])

    def testTemplateStringsBecomeTemplates(self):
        command = Command("prog", help_template="{usage}")
        self.assertEqual(command.help_template, HelpTemplate("{usage}"))

    def testTemplateMustBeStringOrTemplate(self):
        with self.assertRaises(TypeError):
            Command("prog", help_template=42)

    def testReprMentionsName(self):
        self.assertIn("name='prog'", repr(Command("prog")))


class TestCommandConflicts(TestCase):
    """Ambiguous definitions are rejected when the command is built."""

    def testDuplicateId(self):
        with self.assertRaises(ValueError):
            Command("prog", args=[Arg("file"), Arg("file", long="file")])

    def testDuplicateShort(self):
        with self.assertRaises(ValueError):
            Command("prog", args=[Arg("verbose", "v"), Arg("version-check", "v")])

    def testDuplicateLong(self):
        with self.assertRaises(ValueError):
            Command("prog", args=[Arg("a", long="all"), Arg("b", long="all")])

    def testConflictWithImplicitHelp(self):
        with self.assertRaises(ValueError):
            Command("prog", args=[Arg("host", "h", takes_value=True)])
        with self.assertRaises(ValueError):
            Command("prog", args=[Arg("help", long="manual")])

    def testConflictWithImplicitVersion(self):
        with self.assertRaises(ValueError):
            Command("prog", args=[Arg("show-version", long="version")])

    def testDuplicateSubcommandName(self):
        with self.assertRaises(ValueError):
            Command("prog", subcommands=[Command("run"), Command("run")])

    def testParentCannotDeclarePositionals(self):
        with self.assertRaises(ValueError):
            Command("prog", args=[Arg("file")], subcommands=[Command("run")])

    def testParentCannotDeclareRequiredArgs(self):
        with self.assertRaises(ValueError):
            Command("prog", args=[Arg("name", long="name", takes_value=True, required=True)], subcommands=[Command("run")])

    def testParentMayDeclareOptions(self):
        command = Command("prog", args=[Arg("debug", long="debug")], subcommands=[Command("run")])
        self.assertEqual(len(command.subcommands), 1)


class TestCommandComposition(TestCase):
    """Immutability, fluent builders and subcommand stamping."""

    def testCommandIsImmutable(self):
        command = Command("prog")
        with self.assertRaises(AttributeError):
            command.name = "other"
        with self.assertRaises(AttributeError):
            command._name = "other"

    def testArgReturnsNewCommand(self):
        command = Command("prog")
        extended = command.arg(Arg("file"), Arg("debug", "d"))
        self.assertEqual([arg.id for arg in command.args], ["help", "version"])
        self.assertEqual([arg.id for arg in extended.args], ["help", "version", "file", "debug"])

    def testSubcommandReturnsNewCommand(self):
        command = Command("prog")
        extended = command.subcommand(Command("run"))
        self.assertEqual(command.subcommands, ())
        self.assertEqual(extended.find_subcommand("run").name, "run")

    def testReplaceKeepsOtherFields(self):
        command = Command("prog", version="1.0", args=[Arg("file")])
        renamed = copy.replace(command, about="renamed")
        self.assertEqual(renamed.version, "1.0")
        self.assertEqual(renamed.about, "renamed")
        self.assertEqual([arg.id for arg in renamed.args], ["help", "version", "file"])

    def testReplaceRejectsUnknownFields(self):
        with self.assertRaises(TypeError):
            copy.replace(Command("prog"), colour="blue")

    def testFindSubcommandMissing(self):
        self.assertIsNone(Command("prog", subcommands=[Command("run")]).find_subcommand("walk"))

    def testSubcommandIsStamped(self):
        command = Command("prog", subcommands=[Command("run")])
        run = command.find_subcommand("run")
        self.assertEqual(run.bin_name, "prog")
        self.assertEqual(run.subcommand_path, " run")

    def testNestedSubcommandsAreStamped(self):
        remote = Command("remote", subcommands=[Command("add")])
        self.assertEqual(remote.find_subcommand("add").bin_name, "remote")

        command = Command("git", subcommands=[remote])
        add = command.find_subcommand("remote").find_subcommand("add")
        self.assertEqual(add.bin_name, "git")
        self.assertEqual(add.subcommand_path, " remote add")

    def testStampingDoesNotTouchOriginal(self):
        run = Command("run")
        Command("prog", subcommands=[run])
        self.assertEqual(run.bin_name, "run")
        self.assertEqual(run.subcommand_path, "")

    def testStampingFollowsBinName(self):
        command = Command("prog", bin_name="prog.exe", subcommands=[Command("run")])
        self.assertEqual(command.find_subcommand("run").render_usage(), "prog.exe run [OPTIONS]")


class TestCommandRendering(TestCase):
    """Default help, version and usage output."""

    def setUp(self):
        self.command = Command("prog", version="1.0", args=[
            Arg("name", long="name", takes_value=True, help="Name to use"),
            Arg("file", required=True, help="Input file"),
        ])

    def testUsage(self):
        self.assertEqual(self.command.render_usage(), "prog [OPTIONS] <file>")

    def testHelp(self):
        self.assertEqual(
            self.command.render_help(),
            "prog 1.0\n"
            "\n"
            "USAGE:\n"
            "    prog [OPTIONS] <file>\n"
            "\n"
            "ARGS:\n"
            "    <file>" + " " * 14 + "Input file\n"
            "\n"
            "OPTIONS:\n"
            "    -h, --help" + " " * 10 + "Print help information\n"
            "    -V, --version" + " " * 7 + "Print version information\n"
            "        --name <NAME>" + " " * 3 + "Name to use"
        )

    def testVersion(self):
        self.assertEqual(self.command.render_version(), "prog 1.0")

    def testVersionWithoutVersion(self):
        self.assertEqual(Command("prog").render_version(), "prog")

    def testAuthorAndAbout(self):
        command = Command("prog", author="Jane", about="Does things")
        self.assertTrue(command.render_help().startswith("prog\nJane\nDoes things\n\nUSAGE:\n    prog [OPTIONS]\n"))

    def testDisplayNameInHeading(self):
        command = Command("prog", display_name="Prog Tool", version="2.1")
        self.assertEqual(command.render_version(), "Prog Tool 2.1")
        self.assertIn("    prog [OPTIONS]", command.render_help())

    def testSubcommandSection(self):
        command = Command("prog", subcommands=[Command("run", about="Run it"), Command("stop")])
        help = command.render_help()
        self.assertIn("USAGE:\n    prog [OPTIONS] [SUBCOMMAND]\n", help)
        self.assertTrue(help.endswith("SUBCOMMANDS:\n    run" + " " * 17 + "Run it\n    stop"))

    def testSubcommandUsageCarriesPath(self):
        command = Command("git", subcommands=[Command("remote", subcommands=[
            Command("add", args=[Arg("url", required=True)]),
        ])])
        add = command.find_subcommand("remote").find_subcommand("add")
        self.assertEqual(add.render_usage(), "git remote add [OPTIONS] <url>")

    def testCustomTemplate(self):
        command = Command("prog", version="3", help_template="{name-version} :: {usage} {unknown}")
        self.assertEqual(command.render_help(), "prog 3 :: prog [OPTIONS] {unknown}")


class TestProcessWrapper(TestCase):
    """get_matches_from prints and exits on anything but a match."""

    def setUp(self):
        self.command = Command("prog", version="1.0", args=[Arg("file", required=True)])

    def testMatchesAreReturned(self):
        self.assertEqual(self.command.get_matches_from(["prog", "a"]).get_one("file"), "a")

    def testHelpExitsWithZero(self):
        stdout = io.StringIO()
        with redirect_stdout(stdout), self.assertRaises(SystemExit) as context:
            self.command.get_matches_from(["prog", "--help"])
        self.assertEqual(context.exception.code, 0)
        self.assertEqual(stdout.getvalue().rstrip("\n"), self.command.render_help())

    def testVersionExitsWithZero(self):
        stdout = io.StringIO()
        with redirect_stdout(stdout), self.assertRaises(SystemExit) as context:
            self.command.get_matches_from(["prog", "-V"])
        self.assertEqual(context.exception.code, 0)
        self.assertEqual(stdout.getvalue().strip(), "prog 1.0")

    def testFaultExitsWithTwo(self):
        stderr = io.StringIO()
        with redirect_stderr(stderr), self.assertRaises(SystemExit) as context:
            self.command.get_matches_from(["prog", "a", "--bogus"])
        self.assertEqual(context.exception.code, 2)
        self.assertIn("--bogus", stderr.getvalue())

    def testFancyFaultExitsWithTwo(self):
        stderr = io.StringIO()
        with redirect_stderr(stderr), self.assertRaises(SystemExit) as context:
            self.command.get_matches_from(["prog"], fancy=True)
        self.assertEqual(context.exception.code, 2)
        self.assertIn("<file>", stderr.getvalue())


if __name__ == "__main__":
    unittest.main()
