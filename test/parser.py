"""
Parser behavioral tests (tokenizing, converting, validating, querying).

Scope
- The reference scenarios: positionals with an option, defaults, validated
  lists, missing positionals, help precedence.
- Token grammar: long/short markers, negative numbers, lists, "--", inline
  values, repeated options, unexpected positionals.
- Queries: typed getters, alias equivalence, idempotence, has/provided,
  boolean leniency, type mismatches.
- Shell mode: faults printed on stderr, exit status 1.

Conventions
- Test method names follow CamelCase per project convention.
- Every parser receives an explicit argv; help handlers are replaced so the
  default exit never fires, except where the exit itself is asserted.
"""
import io
import unittest
import warnings
from unittest import TestCase, mock

from rich.console import Console

from argy import (
    Parser,
    Unset,
    ArgumentException,
    UnknownArgumentError,
    MissingArgumentError,
    MissingValueError,
    UnexpectedPositionalArgumentError,
    InvalidValueError,
    OutOfRangeError,
    TypeMismatchError,
    EmptyListWarning,
    RepeatedArgumentWarning,
)
from argy import faults


def _declare(parser):
    parser.add_string("filename", help="Input file")
    parser.add_int("number", help="A number")
    parser.add_int("-c", "--count", help="Count", default=10)
    return parser


class TestScenarios(TestCase):

    def testPositionalsAndOption(self):
        parser = _declare(Parser(["prog", "input.txt", "42", "--count", "7"])).parse()
        self.assertEqual(parser.get_string("filename"), "input.txt")
        self.assertEqual(parser.get_int("number"), 42)
        self.assertEqual(parser.get_int("count"), 7)

    def testDefaultUsedWhenAbsent(self):
        parser = Parser(["prog", "foo.txt"])
        parser.add_string("filename", help="Input file")
        parser.add_int("-c", "--count", help="Count", default=10)
        parser.parse()
        self.assertEqual(parser.get_string("filename"), "foo.txt")
        self.assertEqual(parser.get_int("count"), 10)

    def testValidatedList(self):
        parser = Parser(["prog", "--ids", "10", "20", "30"])
        parser.add_ints("--ids", help="ids").in_range(1, 50)
        self.assertEqual(parser.parse().get_ints("ids"), [10, 20, 30])

    def testValidatedListOutOfRange(self):
        parser = Parser(["prog", "--ids", "10", "60", "30"])
        parser.add_ints("--ids", help="ids").in_range(1, 50)
        with self.assertRaises(OutOfRangeError):
            parser.parse()

    def testMissingPositional(self):
        parser = Parser(["prog"])
        parser.add_string("filename")
        with self.assertRaises(MissingArgumentError) as context:
            parser.parse()
        self.assertNotIsInstance(context.exception, MissingValueError)
        self.assertEqual(context.exception.argument, "filename")

    def testHelpWinsOverMissingArguments(self):
        received = []
        parser = _declare(Parser(["prog", "--help"]))
        parser.set_help_handler(received.append)
        parser.parse()
        self.assertEqual(received, ["prog"])
        self.assertFalse(parser.has("filename"))
        self.assertFalse(parser.has("count"))


class TestHelp(TestCase):

    def testShortHelpAnywhere(self):
        received = []
        parser = _declare(Parser(["prog", "x", "--count", "nope", "-h"]))
        parser.set_help_handler(received.append)
        parser.parse()
        self.assertEqual(received, ["prog"])

    def testHelpWinsOverUnknownOptions(self):
        received = []
        parser = Parser(["prog", "--bogus", "--help"])
        parser.set_help_handler(received.append)
        parser.parse()
        self.assertEqual(len(received), 1)

    def testHelpAfterSeparatorIsAValue(self):
        received = []
        parser = Parser(["prog", "--", "--help"])
        parser.add_string("filename")
        parser.set_help_handler(received.append)
        parser.parse()
        self.assertEqual(received, [])
        self.assertEqual(parser.get_string("filename"), "--help")

    def testHelpLeavesPreviousValuesUntouched(self):
        parser = Parser()
        parser.add_int("-c", "--count", default=10)
        parser.set_help_handler(lambda name: None)
        parser.parse(["prog", "-c", "3"])
        parser.parse(["prog", "-h"])
        self.assertEqual(parser.get_int("count"), 3)

    def testDefaultHandlerPrintsAndExitsZero(self):
        buffer = io.StringIO()
        parser = _declare(Parser(["prog", "--help"], console=Console(file=buffer, width=80)))
        with self.assertRaises(SystemExit) as context:
            parser.parse()
        self.assertEqual(context.exception.code, 0)
        self.assertIn("usage:", buffer.getvalue())
        self.assertIn("--count", buffer.getvalue())

    def testHandlerMustBeCallable(self):
        with self.assertRaises(TypeError):
            Parser().set_help_handler("nope")


class TestTokens(TestCase):

    def testShortMarker(self):
        parser = _declare(Parser(["prog", "a", "1", "-c", "3"])).parse()
        self.assertEqual(parser.get_int("count"), 3)

    def testMarkersAnywhere(self):
        parser = _declare(Parser(["prog", "-c", "3", "a", "1"])).parse()
        self.assertEqual(parser.get_string("filename"), "a")
        self.assertEqual(parser.get_int("number"), 1)
        self.assertEqual(parser.get_int("count"), 3)

    def testNegativeNumbersAreValues(self):
        parser = Parser(["prog", "-5", "--ratio", "-0.5", "--ids", "-1", "-2", "3"])
        parser.add_int("number")
        parser.add_float("-r", "--ratio", default=1.0)
        parser.add_ints("--ids", default=[])
        parser.parse()
        self.assertEqual(parser.get_int("number"), -5)
        self.assertEqual(parser.get_float("ratio"), -0.5)
        self.assertEqual(parser.get_ints("ids"), [-1, -2, 3])

    def testLoneDashIsAValue(self):
        parser = Parser(["prog", "-"])
        parser.add_string("filename")
        self.assertEqual(parser.parse().get_string("filename"), "-")

    def testLongMarkerMatchesLongFormsOnly(self):
        parser = Parser(["prog", "--c", "3"])
        parser.add_int("-c", "--count", default=10)
        with self.assertRaises(UnknownArgumentError):
            parser.parse()

    def testShortMarkerMatchesShortFormsOnly(self):
        parser = Parser(["prog", "-count", "3"])
        parser.add_int("-c", "--count", default=10)
        with self.assertRaises(UnknownArgumentError):
            parser.parse()

    def testPositionalNotReachableByMarker(self):
        parser = Parser(["prog", "--filename", "x"])
        parser.add_string("filename")
        with self.assertRaises(UnknownArgumentError):
            parser.parse()

    def testUnknownOptionSuggests(self):
        parser = Parser(["prog", "--cont", "3"])
        parser.add_int("-c", "--count", default=10)
        with self.assertRaises(UnknownArgumentError) as context:
            parser.parse()
        self.assertIn("count", context.exception.options["suggestions"])
        self.assertEqual(context.exception.token, "--cont")

    def testBooleanFlag(self):
        parser = Parser(["prog", "--verbose", "file"])
        parser.add_bool("-v", "--verbose")
        parser.add_string("filename")
        parser.parse()
        self.assertIs(parser.get_bool("verbose"), True)
        self.assertEqual(parser.get_string("filename"), "file")

    def testListCollectsUntilNextMarker(self):
        parser = Parser(["prog", "--ids", "1", "2", "-c", "3", "file"])
        parser.add_ints("--ids")
        parser.add_int("-c", default=1)
        parser.add_string("filename")
        parser.parse()
        self.assertEqual(parser.get_ints("ids"), [1, 2])
        self.assertEqual(parser.get_int("c"), 3)
        self.assertEqual(parser.get_string("filename"), "file")

    def testListPreservesOrderAndCount(self):
        tokens = ["b", "a", "c", "a"]
        parser = Parser(["prog", "--names", *tokens])
        parser.add_strings("--names")
        self.assertEqual(parser.parse().get_strings("names"), tokens)

    def testListOfBooleansAndFloats(self):
        parser = Parser(["prog", "--flags", "true", "0", "1", "--ratios", "0.5", "2"])
        parser.add_bools("--flags")
        parser.add_floats("--ratios")
        parser.parse()
        self.assertEqual(parser.get_bools("flags"), [True, False, True])
        self.assertEqual(parser.get_floats("ratios"), [0.5, 2.0])

    def testPositionalList(self):
        parser = Parser(["prog", "out", "a", "b", "c", "-v"])
        parser.add_string("target")
        parser.add_strings("sources")
        parser.add_bool("-v")
        parser.parse()
        self.assertEqual(parser.get_string("target"), "out")
        self.assertEqual(parser.get_strings("sources"), ["a", "b", "c"])
        self.assertTrue(parser.get_bool("v"))

    def testSeparator(self):
        parser = Parser(["prog", "-c", "3", "--", "-c", "--x"])
        parser.add_int("-c", default=1)
        parser.add_string("first")
        parser.add_string("second")
        parser.parse()
        self.assertEqual(parser.get_int("c"), 3)
        self.assertEqual(parser.get_string("first"), "-c")
        self.assertEqual(parser.get_string("second"), "--x")

    def testInlineValues(self):
        parser = Parser(["prog", "--count=7", "-r=-0.5", "--ids=1,2,3", "--verbose=0"])
        parser.add_int("--count", default=1)
        parser.add_float("-r", default=1.0)
        parser.add_ints("--ids", default=[])
        parser.add_bool("--verbose", default=True)
        parser.parse()
        self.assertEqual(parser.get_int("count"), 7)
        self.assertEqual(parser.get_float("r"), -0.5)
        self.assertEqual(parser.get_ints("ids"), [1, 2, 3])
        self.assertIs(parser.get_bool("verbose"), False)

    def testInlineValueEndsFilling(self):
        parser = Parser(["prog", "--ids=1", "file"])
        parser.add_ints("--ids")
        parser.add_string("filename")
        parser.parse()
        self.assertEqual(parser.get_ints("ids"), [1])
        self.assertEqual(parser.get_string("filename"), "file")

    def testUnexpectedPositional(self):
        parser = Parser(["prog", "a", "b"])
        parser.add_string("filename")
        with self.assertRaises(UnexpectedPositionalArgumentError) as context:
            parser.parse()
        self.assertEqual(context.exception.token, "b")

    def testUnexpectedPositionalWithoutDeclarations(self):
        with self.assertRaises(UnexpectedPositionalArgumentError):
            Parser(["prog", "stray"]).parse()

    def testScalarMarkerWithoutValueFallsBackToDefault(self):
        for argv in (["prog", "--count"], ["prog", "--count", "--verbose"]):
            with self.subTest(argv=argv):
                parser = Parser(argv)
                parser.add_int("--count", default=10)
                parser.add_bool("--verbose")
                parser.parse()
                self.assertEqual(parser.get_int("count"), 10)

    def testRequiredScalarMarkerWithoutValue(self):
        for argv in (["prog", "--count"], ["prog", "--count", "--verbose"]):
            with self.subTest(argv=argv):
                parser = Parser(argv)
                parser.add_int("--count")
                parser.add_bool("--verbose")
                with self.assertRaises(MissingValueError) as context:
                    parser.parse()
                self.assertIsInstance(context.exception, MissingArgumentError)
                self.assertEqual(context.exception.argument, "--count")

    def testInlineListKeepsEmptyItems(self):
        parser = Parser(["prog", "--tags=a,,b"])
        parser.add_strings("--tags")
        self.assertEqual(parser.parse().get_strings("tags"), ["a", "", "b"])

    def testInlineListEmptyNumber(self):
        parser = Parser(["prog", "--ids=1,,2"])
        parser.add_ints("--ids")
        with self.assertRaises(InvalidValueError) as context:
            parser.parse()
        self.assertEqual(context.exception.token, "")

    def testEmptyListWarns(self):
        parser = Parser(["prog", "--ids", "--verbose"])
        parser.add_ints("--ids", default=[1])
        parser.add_bool("--verbose")
        with self.assertWarns(EmptyListWarning):
            parser.parse()
        self.assertEqual(parser.get_ints("ids"), [])

    def testRepeatedOptionLaterWins(self):
        parser = Parser(["prog", "-c", "1", "--count", "2"])
        parser.add_int("-c", "--count", default=10)
        with self.assertWarns(RepeatedArgumentWarning):
            parser.parse()
        self.assertEqual(parser.get_int("count"), 2)

    def testRepeatedListResets(self):
        parser = Parser(["prog", "--ids", "1", "2", "--ids", "3"])
        parser.add_ints("--ids")
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", RepeatedArgumentWarning)
            parser.parse()
        self.assertEqual(parser.get_ints("ids"), [3])


class TestConversion(TestCase):

    def testMalformedInteger(self):
        parser = Parser(["prog", "--count", "seven"])
        parser.add_int("-c", "--count", default=10)
        with self.assertRaises(InvalidValueError) as context:
            parser.parse()
        self.assertEqual(context.exception.argument, "--count")
        self.assertEqual(context.exception.token, "seven")

    def testFloatOverflow(self):
        parser = Parser(["prog", "--ratio", "1e999"])
        parser.add_float("--ratio", default=1.0)
        with self.assertRaises(OutOfRangeError):
            parser.parse()

    def testBooleanListNeverFails(self):
        parser = Parser(["prog", "--flags", "yes", "TRUE"])
        parser.add_bools("--flags")
        self.assertEqual(parser.parse().get_bools("flags"), [False, False])

    def testMissingRequiredOption(self):
        parser = Parser(["prog"])
        parser.add_int("--count")
        with self.assertRaises(MissingArgumentError) as context:
            parser.parse()
        self.assertEqual(context.exception.argument, "--count")

    def testFirstMissingInRegistrationOrder(self):
        parser = Parser(["prog"])
        parser.add_string("first")
        parser.add_string("second")
        with self.assertRaises(MissingArgumentError) as context:
            parser.parse()
        self.assertEqual(context.exception.argument, "first")


class TestValidation(TestCase):

    def testValidatorReceivesKeyAndValue(self):
        calls = []
        parser = Parser(["prog", "--count", "7"])
        parser.add_int("-c", "--count", default=10).validate(lambda name, value: calls.append((name, value)))
        parser.parse()
        self.assertEqual(calls, [("c", 7)])

    def testDefaultsAreValidated(self):
        parser = Parser(["prog"])
        parser.add_int("--count", default=500).in_range(1, 100)
        with self.assertRaises(OutOfRangeError):
            parser.parse()

    def testAbsentBooleanNotValidated(self):
        calls = []
        parser = Parser(["prog"])
        parser.add_bool("--verbose").validate(lambda name, value: calls.append(value))
        parser.parse()
        self.assertEqual(calls, [])

    def testValidatorsChainInOrder(self):
        calls = []
        parser = Parser(["prog", "--count", "7"])
        builder = parser.add_int("--count", default=1)
        builder.validate(lambda name, value: calls.append("first"))
        builder.validate(lambda name, value: calls.append("second"))
        parser.parse()
        self.assertEqual(calls, ["first", "second"])

    def testValidatorRejectionStopsChain(self):
        calls = []

        def reject(name, value):
            raise InvalidValueError("rejected %r" % value)

        parser = Parser(["prog", "--count", "7"])
        parser.add_int("--count", default=1).validate(reject).validate(lambda name, value: calls.append(value))
        with self.assertRaises(InvalidValueError) as context:
            parser.parse()
        self.assertEqual(str(context.exception), "rejected 7")
        self.assertEqual(calls, [])

    def testPlainValueErrorWrapped(self):
        def reject(name, value):
            raise ValueError("odd number")

        parser = Parser(["prog", "--count", "7"])
        parser.add_int("--count", default=2).validate(reject)
        with self.assertRaises(InvalidValueError) as context:
            parser.parse()
        self.assertIsInstance(context.exception.__cause__, ValueError)
        self.assertIn("odd number", str(context.exception))

    def testCustomFaultSubtypePropagates(self):
        class PortTaken(InvalidValueError):
            def __init__(self, port):
                super().__init__("port %d is taken" % port, argument="port")
                self.port = port

        def vacant(name, value):
            if value == 80:
                raise PortTaken(value)

        parser = Parser(["prog", "--port", "80"], prog="server")
        parser.add_int("-p", "--port", default=8080).validate(vacant)
        with self.assertRaises(PortTaken) as context:
            parser.parse()
        self.assertEqual(context.exception.port, 80)
        self.assertEqual(str(context.exception), "port 80 is taken")
        self.assertEqual(context.exception.argument, "port")
        self.assertEqual(context.exception.options["prog"], "server")

    def testOtherExceptionsPropagate(self):
        def broken(name, value):
            raise RuntimeError("bug")

        parser = Parser(["prog"])
        parser.add_int("--count", default=2).validate(broken)
        with self.assertRaises(RuntimeError):
            parser.parse()


class TestQueries(TestCase):

    def setUp(self):
        self.parser = Parser(["prog", "input.txt", "42", "--count", "7", "--ids", "1", "2"])
        _declare(self.parser)
        self.parser.add_ints("-i", "--ids")
        self.parser.add_bool("-v", "--verbose")
        self.parser.add_string("--mode", default="fast")
        self.parser.parse()

    def testAliasEquivalence(self):
        values = {self.parser.get_int(name) for name in ("c", "count", "-c", "--count")}
        self.assertEqual(values, {7})

    def testIdempotentQueries(self):
        first = self.parser.get_ints("ids")
        first.append(99)
        self.assertEqual(self.parser.get_ints("ids"), [1, 2])
        self.assertEqual(self.parser.get_ints("ids"), self.parser.get_ints("ids"))

    def testGetWithAnnotation(self):
        self.assertEqual(self.parser.get("ids", list[int]), [1, 2])
        self.assertEqual(self.parser.get("count", int), 7)
        self.assertEqual(self.parser["filename"], "input.txt")

    def testTypeMismatch(self):
        with self.assertRaises(TypeMismatchError):
            self.parser.get_string("count")
        with self.assertRaises(TypeMismatchError):
            self.parser.get_int("ids")
        with self.assertRaises(TypeMismatchError):
            self.parser.get_float("count")
        with self.assertRaises(TypeMismatchError):
            self.parser.get_bools("verbose")

    def testBooleanGetterNeverMismatches(self):
        self.assertIs(self.parser.get_bool("count"), False)
        self.assertIs(self.parser.get_bool("filename"), False)
        self.assertIs(self.parser.get_bool("ids"), False)

    def testUnknownName(self):
        with self.assertRaises(UnknownArgumentError):
            self.parser.get_int("missing")
        with self.assertRaises(UnknownArgumentError):
            self.parser["missing"]

    def testBooleanLeniency(self):
        self.assertIs(self.parser.get_bool("verbose"), False)
        self.assertIs(self.parser.get_bool("--undeclared"), False)
        self.assertIs(self.parser["verbose"], False)

    def testHas(self):
        self.assertTrue(self.parser.has("count"))
        self.assertTrue(self.parser.has("mode"))
        self.assertFalse(self.parser.has("verbose"))
        self.assertFalse(self.parser.has("undeclared"))

    def testProvided(self):
        self.assertTrue(self.parser.provided("--count"))
        self.assertTrue(self.parser.provided("filename"))
        self.assertFalse(self.parser.provided("mode"))
        self.assertFalse(self.parser.provided("undeclared"))

    def testDefaultRoundTrip(self):
        self.assertEqual(self.parser.get_string("mode"), "fast")

    def testDescriptorsExposed(self):
        self.assertEqual([argument.key for argument in self.parser.positionals], ["filename", "number"])
        self.assertEqual(
            [argument.key for argument in self.parser.arguments],
            ["filename", "number", "c", "i", "v", "mode"],
        )


class TestLifecycle(TestCase):

    def testHasIsFalseBeforeParse(self):
        parser = Parser(["prog"])
        parser.add_int("--count", default=10)
        self.assertFalse(parser.has("count"))

    def testGetBeforeParseFallsBackToDefault(self):
        parser = Parser()
        parser.add_int("--count", default=10)
        self.assertEqual(parser.get_int("count"), 10)

    def testGetBeforeParseWithoutDefault(self):
        parser = Parser()
        parser.add_int("--count")
        with self.assertRaises(MissingArgumentError):
            parser.get_int("count")

    def testReparseResetsValues(self):
        parser = Parser()
        parser.add_int("-c", "--count", default=10)
        parser.add_bool("-v")
        parser.parse(["prog", "-c", "3", "-v"])
        self.assertEqual(parser.get_int("count"), 3)
        parser.parse(["prog"])
        self.assertEqual(parser.get_int("count"), 10)
        self.assertFalse(parser.get_bool("v"))
        self.assertFalse(parser.provided("c"))

    def testFailedParseStoresNothing(self):
        parser = Parser(["prog", "--a", "1", "--b", "nope"])
        parser.add_int("--a", default=0)
        parser.add_int("--b", default=0)
        with self.assertRaises(InvalidValueError):
            parser.parse()
        self.assertFalse(parser.has("a"))
        self.assertFalse(parser.has("b"))
        self.assertEqual(parser.get_int("a"), 0)

    def testArgvDefaultsToSysArgv(self):
        parser = Parser()
        parser.add_int("--count", default=10)
        with mock.patch("sys.argv", ["tool", "--count", "4"]):
            parser.parse()
        self.assertEqual(parser.get_int("count"), 4)
        self.assertEqual(parser.prog, "tool")

    def testProgFromArgvZero(self):
        parser = Parser(["/usr/local/bin/tool"])
        parser.parse()
        self.assertEqual(parser.prog, "tool")
        self.assertEqual(Parser(["x"], prog="named").prog, "named")

    def testArgvMustContainStrings(self):
        with self.assertRaises(TypeError):
            Parser(["prog", 1])
        with self.assertRaises(TypeError):
            Parser().parse(["prog", None])


class TestShellMode(TestCase):

    def setUp(self):
        self.buffer = io.StringIO()
        patcher = mock.patch.object(faults, "console", Console(file=self.buffer, width=100))
        patcher.start()
        self.addCleanup(patcher.stop)

    def testFaultPrintedAndExitsOne(self):
        parser = Parser(["prog", "--bogus"], shell=True, colorful=False)
        with self.assertRaises(SystemExit) as context:
            parser.parse()
        self.assertEqual(context.exception.code, 1)
        output = self.buffer.getvalue()
        self.assertIn("unknown option '--bogus'", output)
        self.assertIn("11111", output)

    def testWarningPrinted(self):
        parser = Parser(["prog", "-c", "1", "-c", "2"], shell=True, colorful=False)
        parser.add_int("-c", default=0)
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            parser.parse()
        self.assertEqual(parser.get_int("c"), 2)
        self.assertIn("repeated argument", self.buffer.getvalue().lower())

    def testCustomFaultSubtypePrinted(self):
        class PortTaken(InvalidValueError):
            def __init__(self, port):
                super().__init__("port %d is taken" % port)
                self.port = port

        def vacant(name, value):
            raise PortTaken(value)

        parser = Parser(["prog", "--port", "80"], shell=True, colorful=False)
        parser.add_int("--port", default=8080).validate(vacant)
        with self.assertRaises(SystemExit) as context:
            parser.parse()
        self.assertEqual(context.exception.code, 1)
        self.assertIn("port 80 is taken", self.buffer.getvalue())

    def testQueryFaultsStillRaise(self):
        parser = Parser(["prog"], shell=True)
        parser.parse()
        with self.assertRaises(ArgumentException):
            parser.get_int("missing")


if __name__ == '__main__':
    unittest.main()
