"""
Matches module behavioral tests (ArgMatches construction and accessors).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from clasp import ArgMatches


class TestArgMatchesConstruction(TestCase):

    def testValuesAreFrozenTuples(self):
        matches = ArgMatches({"tag": ["x", "y"]})
        self.assertEqual(matches["tag"], ("x", "y"))

    def testSourceListIsCopied(self):
        values = ["x"]
        matches = ArgMatches({"tag": values})
        values.append("y")
        self.assertEqual(matches["tag"], ("x",))

    def testEmptyRecordingRejected(self):
        with self.assertRaises(ValueError):
            ArgMatches({"tag": []})

    def testNonStringValuesRejected(self):
        with self.assertRaises(TypeError):
            ArgMatches({"count": [3]})
        with self.assertRaises(TypeError):
            ArgMatches({"name": "foo"})

    def testSubcommandMustBePair(self):
        with self.assertRaises(TypeError):
            ArgMatches({}, subcommand=("run", {}))

    def testEquality(self):
        self.assertEqual(ArgMatches({"a": ["1"]}), ArgMatches({"a": ("1",)}))
        self.assertNotEqual(
            ArgMatches({}, subcommand=("run", ArgMatches())),
            ArgMatches({}, subcommand=("stop", ArgMatches())),
        )


class TestArgMatchesAccessors(TestCase):

    def setUp(self):
        self.matches = ArgMatches({
            "name": ["foo"],
            "tag": ["x", "y"],
            "debug": ["true"],
            "color": ["false"],
            "verbose": ["3"],
        })

    def testMappingProtocol(self):
        self.assertEqual(len(self.matches), 5)
        self.assertIn("name", self.matches)
        self.assertEqual(list(self.matches), ["name", "tag", "debug", "color", "verbose"])
        self.assertEqual(self.matches.ids(), ("name", "tag", "debug", "color", "verbose"))

    def testGetOneReturnsFirstValue(self):
        self.assertEqual(self.matches.get_one("name"), "foo")
        self.assertEqual(self.matches.get_one("tag"), "x")
        self.assertIsNone(self.matches.get_one("missing"))

    def testGetMany(self):
        self.assertEqual(self.matches.get_many("tag"), ("x", "y"))
        self.assertIsNone(self.matches.get_many("missing"))

    def testGetFlag(self):
        self.assertTrue(self.matches.get_flag("debug"))
        self.assertFalse(self.matches.get_flag("color"))
        self.assertFalse(self.matches.get_flag("missing"))

    def testGetCount(self):
        self.assertEqual(self.matches.get_count("verbose"), 3)
        self.assertEqual(self.matches.get_count("missing"), 0)

    def testGetCountRejectsNonCounts(self):
        with self.assertRaises(ValueError):
            self.matches.get_count("name")
        with self.assertRaises(ValueError):
            self.matches.get_count("tag")

    def testContainsId(self):
        self.assertTrue(self.matches.contains_id("color"))
        self.assertFalse(self.matches.contains_id("missing"))

    def testNoSubcommand(self):
        self.assertIsNone(self.matches.subcommand)
        self.assertIsNone(self.matches.subcommand_name)
        self.assertIsNone(self.matches.subcommand_matches("run"))


class TestArgMatchesSubcommand(TestCase):

    def testNestedMatches(self):
        nested = ArgMatches({"target": ["x"]})
        matches = ArgMatches({}, subcommand=("run", nested))
        self.assertEqual(matches.subcommand, ("run", nested))
        self.assertEqual(matches.subcommand_name, "run")
        self.assertIs(matches.subcommand_matches("run"), nested)
        self.assertIsNone(matches.subcommand_matches("stop"))

    def testReprShowsSubcommand(self):
        self.assertIn("'run'", repr(ArgMatches({}, subcommand=("run", ArgMatches()))))


if __name__ == "__main__":
    unittest.main()
