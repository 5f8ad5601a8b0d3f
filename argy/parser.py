r"""
Argy parser: declare, parse, convert, validate, query.

What this module provides
- Parser: owns the name registry and the argument descriptors of one program.
  • Registration: add(kind, *names, help=..., default=...) and the typed
    shortcuts add_int(...), add_strings(...), ...; each returns a Builder for
    attaching validators.
  • Parsing: parse(argv) runs a help pre-scan, one left-to-right pass over the
    tokens, then converts, defaults and validates every argument.
  • Queries: get(name, kind), the typed getters get_int(...), ..., has(name),
    provided(name) and parser[name].
  • Help: a rich-rendered help screen, printed by the default help handler.

Token grammar
- "--name" / "-n": option markers. Booleans are set on sight; scalars take the
  next token; lists collect every following value token up to the next marker.
  a scalar marker left without a value leaves the option absent, so its
  default applies (MissingValueError when it has none).
- "--name=value": inline value (lists split it on ",", keeping empty items).
- "-5", "-0.5", "-1e3", "-": values, never markers.
- "--": every later token is a value (positional unless an option is filling).
- anything else: a value for the option being filled, else the next positional.
- "-h" / "--help" anywhere before "--": the help handler runs and parse()
  returns at once, ahead of any other check.

Quick start
    >>> parser = Parser(["prog", "input.txt", "42", "--count", "7"])
    >>> parser.add_string("filename", help="Input file")
    >>> parser.add_int("number", help="A number")
    >>> parser.add_int("-c", "--count", help="Count", default=10).in_range(1, 100)
    >>> parser.parse()
    >>> parser.get_string("filename"), parser.get_int("number"), parser.get_int("count")
    ('input.txt', 42, 7)
"""
import difflib
import io
import os
import sys

from rich.console import Console

from .arguments import Argument, Builder
from .faults import *
from .kinds import Kind, isnegative, render
from .registry import Registry
from .rendering import render as _render, plain
from .utils import *


def _ordinal(number):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with English suffixes.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


class Parser:
    """
    Command-line parser for one program.

    Parameters
    - argv: default token list for parse(); argv[0] is the program name.
      Defaults to sys.argv at parse time.
    - prog: program name shown in help and fault headers (defaults to the
      basename of argv[0]).
    - shell: render parse faults on stderr and exit with status 1 instead of
      raising; print warnings instead of issuing them.
    - fancy: wrap help and faults in rich panels.
    - colorful: style help and faults (False renders plain text).
    - console: rich console the help screen is printed to (stdout by default).

    Lifecycle
    - declare every argument, then call parse(); declaring after a parse is an
      InvalidArgumentError.
    - parse() may be called again; each call resets parsed values first.
    - query with get()/has()/provided() after parse().
    """

    def __init__(self, argv=Unset, /, *, prog=Unset, shell=False, fancy=False, colorful=True, console=Unset):
        if argv is not Unset:
            argv = list(argv)
            if not all(isinstance(token, str) for token in argv):
                raise TypeError("Parser() argv must be a sequence of strings")
        if prog is not Unset and not isinstance(prog, str):
            raise TypeError("Parser() 'prog' must be a string")
        if console is not Unset and not isinstance(console, Console):
            raise TypeError("Parser() 'console' must be a rich console")

        self._argv = argv
        self._prog = prog
        self._name = Unset
        self._console = console
        self._registry = Registry()
        self._arguments = {}
        self._parsed = False
        self._handler = Unset
        self._header = ""
        self._description = ""
        self._footer = ""

        self.shell = bool(shell)
        self.fancy = bool(fancy)
        self.colorful = bool(colorful)

    # --- metadata ------------------------------------------------------------

    @property
    def prog(self):
        """program name: explicit prog, else basename of the last argv[0]."""
        if self._prog is not Unset:
            return self._prog
        name = coalesce(self._name, (coalesce(self._argv, sys.argv) or [""])[0])
        return os.path.basename(name) or "argy"

    @property
    def header(self):
        return self._header

    @property
    def description(self):
        return self._description

    @property
    def footer(self):
        return self._footer

    @property
    def arguments(self):
        """every descriptor, in registration order."""
        return tuple(self._arguments.values())

    @property
    def positionals(self):
        """positional descriptors, in ordinal order."""
        return tuple(self._arguments[key] for key in self._registry.positionals)

    def set_help_header(self, header, /):
        if not isinstance(header, str):
            raise TypeError("set_help_header() argument must be a string")
        self._header = header.strip()
        return self

    def set_help_description(self, description, /):
        if not isinstance(description, str):
            raise TypeError("set_help_description() argument must be a string")
        self._description = description.strip()
        return self

    def set_help_footer(self, footer, /):
        if not isinstance(footer, str):
            raise TypeError("set_help_footer() argument must be a string")
        self._footer = footer.strip()
        return self

    def set_help_handler(self, handler, /):
        """
        replace the help handler; it is called with the program name (argv[0]).

        the default handler prints the help screen and exits with status 0.
        """
        if not callable(handler):
            raise TypeError("set_help_handler() argument must be callable")
        self._handler = handler
        return self

    # --- registration --------------------------------------------------------

    def add(self, kind, /, *names, help="", default=Unset):
        """
        declare an argument and return its Builder.

        - kind: a Kind, or int, float, bool, str, list[int], ... .
        - names: one undashed name for a positional; one or more dashed
          aliases ("-c", "--count") for an option.
        - default: optional value conforming to kind; positionals take none.

        an argument without default is required, except booleans, which are
        never required.
        """
        if self._parsed:
            raise InvalidArgumentError(
                "cannot declare %s after parsing" % ", ".join(map(repr, names)),
                code=FaultCode.INVALID_ARGUMENT,
                hint="declare every argument before calling parse()",
            )

        kind = Kind.of(kind)
        registration = self._registry.classify(names)

        if default is not Unset:
            if registration.positional:
                raise InvalidArgumentError(
                    "positional argument %r cannot have a default" % registration.key,
                    code=FaultCode.INVALID_ARGUMENT,
                    hint="positionals are always required; declare an option ('--%s') instead" % registration.key,
                    argument=registration.key,
                )
            if not kind.conforms(default):
                raise InvalidArgumentError(
                    "default %r of argument %r is not a valid %s" % (default, registration.key, kind.label),
                    code=FaultCode.INVALID_ARGUMENT,
                    hint="pass a default of type %s" % kind.label,
                    argument=registration.key,
                )
            default = kind.normalize(default)

        argument = Argument(
            registration.key,
            registration.names,
            registration.shorts,
            registration.longs,
            kind,
            help=help,
            default=default,
            positional=registration.positional,
        )
        self._registry.commit(registration)
        self._arguments[argument.key] = argument
        return Builder(self, argument.key)

    def add_int(self, *names, help="", default=Unset):
        return self.add(Kind.INT, *names, help=help, default=default)

    def add_float(self, *names, help="", default=Unset):
        return self.add(Kind.FLOAT, *names, help=help, default=default)

    def add_bool(self, *names, help="", default=Unset):
        return self.add(Kind.BOOL, *names, help=help, default=default)

    def add_string(self, *names, help="", default=Unset):
        return self.add(Kind.STRING, *names, help=help, default=default)

    def add_ints(self, *names, help="", default=Unset):
        return self.add(Kind.INTS, *names, help=help, default=default)

    def add_floats(self, *names, help="", default=Unset):
        return self.add(Kind.FLOATS, *names, help=help, default=default)

    def add_bools(self, *names, help="", default=Unset):
        return self.add(Kind.BOOLS, *names, help=help, default=default)

    def add_strings(self, *names, help="", default=Unset):
        return self.add(Kind.STRINGS, *names, help=help, default=default)

    def validate(self, name, validator, /):
        """
        attach a validator to an argument by any of its names.

        validators chain: all of them run after conversion, in the order they
        were attached.
        """
        if not callable(validator):
            raise TypeError("validate() validator must be callable")
        self.argument(name)._validators.append(validator)
        return self

    def argument(self, name, /):
        """the descriptor for any alias of an argument."""
        try:
            return self._arguments[self._registry.resolve(name)]
        except KeyError:
            raise self._unknown(name) from None

    # --- parsing -------------------------------------------------------------

    def trigger(self, fault, /, **options):
        """surface a parse-time fault with this parser's runtime options."""
        trigger(fault, **options, prog=self.prog, shell=self.shell, fancy=self.fancy, colorful=self.colorful)

    def _unknown(self, name, message=Unset, /, **options):
        suggestions = difflib.get_close_matches(str(name).lstrip("-"), self._registry.aliases, 3)
        try:
            hint = "did you mean %r? run '%s --help' to see all arguments" % (suggestions[0], self.prog)
        except IndexError:
            hint = "run '%s --help' to see all arguments" % self.prog
        return UnknownArgumentError(
            coalesce(message, "unknown argument %r" % name),
            code=FaultCode.UNKNOWN_ARGUMENT,
            hint=hint,
            argument=name,
            suggestions=suggestions,
            **options,
        )

    def _resolve_token(self, token, index):
        """
        resolve an option marker to (argument, inline value or None).

        long markers match long forms only, short markers short forms only.
        """
        if token.startswith("--"):
            name, _, value = token[2:].partition("=")
            lookup = self._registry.resolve_long
        else:
            name, _, value = token[1:].partition("=")
            lookup = self._registry.resolve_short
        inline = value if "=" in token else None
        try:
            return self._arguments[lookup(name)], inline
        except KeyError:
            marker = token.partition("=")[0]
            self.trigger(self._unknown(
                marker,
                "unknown option %r at %s position" % (marker, _ordinal(index)),
                token=token,
                index=index,
            ))

    def _settle(self, key, raw, /):
        """close the Filling state of an option whose marker was just left."""
        if key is Unset:
            return
        argument = self._arguments[key]
        if argument.kind.listed:
            if not raw[key]:
                self.trigger(EmptyListWarning(
                    "list option %r received no values" % argument.label,
                    code=FaultCode.EMPTY_LIST,
                    hint="pass values after %s (for example: %s a b c)" % (argument.label, argument.label),
                    argument=argument.label,
                ))
        elif key not in raw and argument.required:
            self.trigger(MissingValueError(
                "option %r expects a value" % argument.label,
                code=FaultCode.MISSING_VALUE,
                hint="pass a %s after %s (for example: %s=<value>)" % (argument.kind.label, argument.label, argument.label),
                argument=argument.label,
            ))

    def _helper(self, name):
        """default help handler: print the help screen and exit with status 0."""
        self.print_help()
        sys.exit(0)

    def parse(self, argv=Unset, /):
        """
        parse argv (argv[0] is the program name) and return the parser.

        phases
        - pre-scan: "-h"/"--help" before any "--" runs the help handler, then
          parse() returns without touching any value.
        - pass: one left-to-right walk with two states, Free and Filling(key).
          raw tokens are collected per argument; nothing is converted yet.
        - post-pass, in registration order: absent and required raises
          MissingArgumentError; absent with default takes the default; present
          values are converted; then every validator runs. values are stored
          only once every argument has passed, so a failed parse leaves none.

        raises (or, in shell mode, prints and exits 1)
        - UnknownArgumentError, MissingValueError, UnexpectedPositionalArgumentError,
          MissingArgumentError, InvalidValueError, OutOfRangeError, or whatever
          ArgumentException a validator raises.

        warns
        - RepeatedArgumentWarning when an option occurs twice (the later wins).
        - EmptyListWarning when a list option receives no values.
        """
        if argv is Unset:
            argv = coalesce(self._argv, sys.argv)
        argv = list(argv)
        if not all(isinstance(token, str) for token in argv):
            raise TypeError("parse() argv must be a sequence of strings")

        name, tokens = (argv[0], argv[1:]) if argv else (self.prog, [])
        self._name = name
        self._parsed = True

        for token in tokens:
            if token == "--":
                break
            if token in ("--help", "-h"):
                coalesce(self._handler, self._helper)(name)
                return self

        for argument in self._arguments.values():
            argument._value = Unset
            argument._provided = False

        raw = {}
        positionals = iter(self._registry.positionals)
        filling = Unset
        separated = False

        for index, token in enumerate(tokens, start=1):
            if not separated and token == "--":
                self._settle(filling, raw)
                filling = Unset
                separated = True
                continue

            if not separated and token.startswith("-") and len(token) > 1 and not isnegative(token):
                self._settle(filling, raw)
                filling = Unset

                argument, value = self._resolve_token(token, index)
                key = argument.key
                if argument.provided:
                    self.trigger(RepeatedArgumentWarning(
                        "option %r given more than once; the %s occurrence wins" % (argument.label, _ordinal(index)),
                        code=FaultCode.REPEATED_ARGUMENT,
                        hint="pass %s only once" % argument.label,
                        argument=argument.label,
                        token=token,
                    ))
                    raw.pop(key, None)
                argument._provided = True

                if value is not None:
                    raw[key] = (value.split(",") if value else []) if argument.kind.listed else value
                    if argument.kind.listed and not raw[key]:
                        self._settle(key, raw)
                elif argument.kind is Kind.BOOL:
                    raw[key] = "true"
                elif argument.kind.listed:
                    raw[key] = []
                    filling = key
                else:
                    filling = key
                continue

            if filling is not Unset:
                if self._arguments[filling].kind.listed:
                    raw[filling].append(token)
                else:
                    raw[filling] = token
                    filling = Unset
                continue

            try:
                key = next(positionals)
            except StopIteration:
                self.trigger(UnexpectedPositionalArgumentError(
                    "unexpected positional argument %r at %s position" % (token, _ordinal(index)),
                    code=FaultCode.UNEXPECTED_POSITIONAL,
                    hint="%s takes %d positional argument%s; run '%s --help' for usage" % (
                        self.prog,
                        len(self._registry.positionals),
                        "s" * (len(self._registry.positionals) != 1),
                        self.prog,
                    ),
                    token=token,
                    index=index,
                ))
            argument = self._arguments[key]
            argument._provided = True
            if argument.kind.listed:
                raw[key] = [token]
                filling = key
            else:
                raw[key] = token

        self._settle(filling, raw)

        values = {}
        for key, argument in self._arguments.items():
            if key in raw:
                try:
                    value = argument.kind.coerce(argument.label, raw[key])
                except ArgumentException as fault:
                    self.trigger(fault)
            elif argument.default is not Unset:
                value = argument.default
            elif argument.required:
                self.trigger(MissingArgumentError(
                    "missing required %s %r" % ("positional" if argument.positional else "option", argument.label),
                    code=FaultCode.MISSING_ARGUMENT,
                    hint="pass %s; run '%s --help' for usage" % (
                        "<%s>" % argument.key if argument.positional else "%s <%s>" % (argument.label, argument.kind.label),
                        self.prog,
                    ),
                    argument=argument.label,
                ))
            else:
                continue

            for validator in argument._validators:
                try:
                    validator(key, value)
                except ArgumentException as fault:
                    self.trigger(fault)
                except ValueError as error:
                    fault = InvalidValueError(
                        "argument %r: %s" % (key, error),
                        code=FaultCode.INVALID_VALUE,
                        argument=argument.label,
                        token=render(value),
                    )
                    fault.__cause__ = error
                    self.trigger(fault)

            values[key] = value

        for key, value in values.items():
            self._arguments[key]._value = value
        return self

    # --- queries -------------------------------------------------------------

    def get(self, name, kind=Unset, /):
        """
        value of an argument by any alias, dash-insensitive.

        - kind (optional): expected kind; a mismatch raises TypeMismatchError.
        - booleans never raise: an unknown name, an absent value or a non-bool
          argument reads as False.
        - an absent value falls back to the default, else MissingArgumentError.
        - lists are returned as fresh copies.
        """
        if kind is not Unset:
            kind = Kind.of(kind)

        try:
            argument = self._arguments[self._registry.resolve(name)]
        except KeyError:
            if kind is Kind.BOOL:
                return False
            raise self._unknown(name) from None

        if kind is Kind.BOOL:
            if argument.kind is not Kind.BOOL:
                return False
            return coalesce(argument.value, argument.default) is True

        if kind is not Unset and kind is not argument.kind:
            raise TypeMismatchError(
                "argument %r holds %s, not %s" % (argument.label, argument.kind.label, kind.label),
                code=FaultCode.TYPE_MISMATCH,
                hint="use get_%s(%r)" % (
                    {
                        Kind.STRING: "string",
                        Kind.INT: "int",
                        Kind.FLOAT: "float",
                        Kind.BOOL: "bool",
                        Kind.STRINGS: "strings",
                        Kind.INTS: "ints",
                        Kind.FLOATS: "floats",
                        Kind.BOOLS: "bools",
                    }[argument.kind],
                    argument.key,
                ),
                argument=argument.label,
            )

        value = coalesce(argument.value, argument.default)
        if value is Unset:
            if argument.kind is Kind.BOOL:
                return False
            raise MissingArgumentError(
                "argument %r has no value" % argument.label,
                code=FaultCode.MISSING_ARGUMENT,
                hint="call parse() first, or declare a default",
                argument=argument.label,
            )
        return value

    def __getitem__(self, name):
        return self.get(name)

    def get_int(self, name, /):
        return self.get(name, Kind.INT)

    def get_float(self, name, /):
        return self.get(name, Kind.FLOAT)

    def get_bool(self, name, /):
        return self.get(name, Kind.BOOL)

    def get_string(self, name, /):
        return self.get(name, Kind.STRING)

    def get_ints(self, name, /):
        return self.get(name, Kind.INTS)

    def get_floats(self, name, /):
        return self.get(name, Kind.FLOATS)

    def get_bools(self, name, /):
        return self.get(name, Kind.BOOLS)

    def get_strings(self, name, /):
        return self.get(name, Kind.STRINGS)

    def has(self, name, /):
        """whether an argument holds a value after parse (defaults count); False for unknown names."""
        try:
            return self._arguments[self._registry.resolve(name)].value is not Unset
        except KeyError:
            return False

    def provided(self, name, /):
        """whether an argument occurred on the command line in the last parse."""
        try:
            return self._arguments[self._registry.resolve(name)].provided
        except KeyError:
            return False

    # --- help ----------------------------------------------------------------

    def print_help(self, console=Unset, /):
        """print the help screen (to the parser's console, stdout by default)."""
        console = coalesce(console, self._console)
        if console is Unset:
            console = Console()
        console.print(_render(self, console, colorful=self.colorful, fancy=self.fancy))

    def format_help(self, width=80):
        """the help screen as plain text."""
        return plain(self, Console(file=io.StringIO(), width=width, color_system=None, highlight=False))

    def __repr__(self):
        return "parser(prog=%r, arguments=%r)" % (self.prog, tuple(self._arguments))


__all__ = (
    "Parser",
)
