"""
Tests for the structured parse errors.

This module verifies:
- The exact text form of every error variant and of an Errors batch.
- Value semantics: equality across variants, hashing, representation.
- Field validation of the constructors.
- Rich rendering (plain and fancy) and host overrides read from __main__.
"""
import sys
import unittest
from unittest import TestCase
from unittest.mock import patch

from rich.console import Console
from rich.panel import Panel

from flagstaff import (
    Errors,
    FaultCode,
    InvalidValue,
    MissingValue,
    UnknownFlag,
    getdoc,
    quoted,
)


def capture(renderable) -> str:
    """
    Render a rich object to plain text with a fixed-width, colorless console.
    """
    console = Console(color_system=None, force_terminal=False, width=120)
    with console.capture() as captured:
        console.print(renderable)
    return captured.get()


class TextTest(TestCase):
    """
    Text form of errors and batches.
    """

    def testUnknownFlag(self) -> None:
        self.assertEqual(str(UnknownFlag(20, "--two")), "Unknown flag `--two` at index 20")

    def testMissingValue(self) -> None:
        self.assertEqual(str(MissingValue(23, "-f")), "Missing value for flag `-f` at index 23")

    def testInvalidValue(self) -> None:
        self.assertEqual(str(InvalidValue(21, "-e", "nan")), 'Invalid value "nan" for flag `-e` at index 21')

    def testInvalidValueEscapes(self) -> None:
        self.assertEqual(
            str(InvalidValue(1, "--name", 'say "hi"')),
            'Invalid value "say \\"hi\\"" for flag `--name` at index 1'
        )

    def testQuoted(self) -> None:
        self.assertEqual(quoted("abc"), '"abc"')
        self.assertEqual(quoted(""), '""')
        self.assertEqual(quoted('a"b'), '"a\\"b"')
        self.assertEqual(quoted("a\\b"), '"a\\\\b"')

    def testEmptyBatch(self) -> None:
        """
        An empty batch renders as the empty string and is falsy.
        """
        errors = Errors()
        self.assertEqual(str(errors), "")
        self.assertFalse(errors)

    def testBatch(self) -> None:
        errors = Errors([UnknownFlag(0, "-x"), MissingValue(1, "-n")])
        self.assertTrue(errors)
        self.assertEqual(str(errors), (
            "\n"
            "Unknown flag `-x` at index 0\n"
            "Missing value for flag `-n` at index 1\n"
        ))


class ValueTest(TestCase):
    """
    Value semantics of the error variants.
    """

    def testEquality(self) -> None:
        self.assertEqual(UnknownFlag(1, "-x"), UnknownFlag(1, "-x"))
        self.assertNotEqual(UnknownFlag(1, "-x"), UnknownFlag(2, "-x"))
        self.assertNotEqual(UnknownFlag(1, "-x"), UnknownFlag(1, "-y"))
        self.assertNotEqual(InvalidValue(1, "-x", "a"), InvalidValue(1, "-x", "b"))

    def testVariantsNeverCompareEqual(self) -> None:
        """
        Same fields, different variants.
        """
        self.assertNotEqual(UnknownFlag(1, "-x"), MissingValue(1, "-x"))
        self.assertNotEqual(MissingValue(1, "-x"), UnknownFlag(1, "-x"))

    def testForeignObjects(self) -> None:
        self.assertNotEqual(UnknownFlag(1, "-x"), (1, "-x"))
        self.assertNotEqual(UnknownFlag(1, "-x"), "Unknown flag `-x` at index 1")

    def testHash(self) -> None:
        errors = {UnknownFlag(1, "-x"), UnknownFlag(1, "-x"), MissingValue(1, "-x")}
        self.assertEqual(len(errors), 2)

    def testFields(self) -> None:
        error = InvalidValue(3, "--port", "http")
        self.assertEqual((error.pos, error.arg, error.val), (3, "--port", "http"))
        self.assertIs(error.code, FaultCode.INVALID_VALUE)

    def testFieldsAreReadOnly(self) -> None:
        error = UnknownFlag(1, "-x")
        with self.assertRaises(AttributeError):
            error.pos = 2

    def testRepr(self) -> None:
        self.assertEqual(repr(UnknownFlag(0, "-x")), "UnknownFlag(pos=0, arg='-x')")
        self.assertEqual(repr(InvalidValue(1, "-e", "nan")), "InvalidValue(pos=1, arg='-e', val='nan')")
        self.assertEqual(repr(Errors([MissingValue(2, "-f")])), "Errors([MissingValue(pos=2, arg='-f')])")

    def testFieldValidation(self) -> None:
        with self.assertRaises(TypeError):
            UnknownFlag("1", "-x")
        with self.assertRaises(TypeError):
            UnknownFlag(True, "-x")
        with self.assertRaises(TypeError):
            MissingValue(1, None)
        with self.assertRaises(TypeError):
            InvalidValue(1, "-x", 3)
        with self.assertRaises(TypeError):
            InvalidValue(1, "-x")


class CodeTest(TestCase):
    """
    Fault codes and host overrides.
    """

    def testCodes(self) -> None:
        self.assertEqual(UnknownFlag.code, 11112)
        self.assertEqual(MissingValue.code, 11117)
        self.assertEqual(InvalidValue.code, 11126)

    def testNormalize(self) -> None:
        self.assertEqual(FaultCode.UNKNOWN_FLAG.normalize(), "11112")

    def testNormalizeOverride(self) -> None:
        with patch.object(sys.modules["__main__"], "__codes__", {FaultCode.UNKNOWN_FLAG: "E-UNKNOWN"}, create=True):
            self.assertEqual(FaultCode.UNKNOWN_FLAG.normalize(), "E-UNKNOWN")
            self.assertEqual(FaultCode.MISSING_VALUE.normalize(), "11117")

    def testGetdoc(self) -> None:
        self.assertIsNone(getdoc(FaultCode.MISSING_VALUE))
        with patch.object(sys.modules["__main__"], "__docs__", {FaultCode.MISSING_VALUE: "see --help"}, create=True):
            self.assertEqual(getdoc(FaultCode.MISSING_VALUE), "see --help")
        with self.assertRaises(TypeError):
            getdoc(11117)


class RenderTest(TestCase):
    """
    Rich rendering of single errors and batches.
    """

    def testHeader(self) -> None:
        output = capture(UnknownFlag(20, "--two"))
        self.assertIn("[ flagstaff — 11112 | Unknown Flag ]", output)
        self.assertIn("Unknown flag `--two` at index 20", output)

    def testHint(self) -> None:
        output = capture(MissingValue(3, "-n"))
        self.assertIn("→ pass a value right after '-n'", output)

    def testProgOverride(self) -> None:
        with patch.object(sys.modules["__main__"], "__prog__", "server", create=True):
            output = capture(InvalidValue(1, "--port", "http"))
        self.assertIn("[ server — 11126 | Invalid Value ]", output)
        self.assertIn('Invalid value "http" for flag `--port` at index 1', output)

    def testDocs(self) -> None:
        with patch.object(sys.modules["__main__"], "__docs__", {FaultCode.UNKNOWN_FLAG: "flags are listed by --help"}, create=True):
            output = capture(UnknownFlag(0, "-x"))
        self.assertIn("flags are listed by --help", output)

    def testColorless(self) -> None:
        group = UnknownFlag(0, "-x").render(colorful=False)
        for renderable in group.renderables:
            self.assertEqual(str(renderable.style), "")

    def testFancy(self) -> None:
        self.assertIsInstance(UnknownFlag(0, "-x").render(fancy=True), Panel)
        self.assertIsInstance(Errors([UnknownFlag(0, "-x")]).render(fancy=True), Panel)

    def testBatch(self) -> None:
        output = capture(Errors([UnknownFlag(0, "-x"), MissingValue(1, "-n")]))
        self.assertIn("[ flagstaff — Invalid Arguments ]", output)
        self.assertIn("[ flagstaff — 11112 | Unknown Flag ]", output)
        self.assertIn("[ flagstaff — 11117 | Missing Value ]", output)
        self.assertLess(output.index("Unknown flag"), output.index("Missing value"))


if __name__ == "__main__":
    unittest.main()
