"""
Argy faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain (naming, parsing, values, queries, warnings).
- ArgumentException / ArgumentWarning: base types that carry a message plus
  read-only options and know how to render themselves with rich.
- trigger(): central entry point to surface a fault (raise, or print and exit
  when running in shell mode).
- getdoc(): optional description lookup for a code from the host application.

Integration
- Registration-time faults (naming, bad defaults) are always raised: they are
  programming errors in the host and must abort setup.
- Parse-time faults go through trigger(); in shell mode they are rendered on
  stderr and the process exits with status 1, otherwise they are raised.
"""
import inspect
import sys
import warnings
from abc import ABC
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
    canonical fault codes (stable identifiers).

    grouping
    - naming (1110x): RESERVED_NAME, DUPLICATE_NAME, INVALID_NAME, INVALID_ARGUMENT
    - parsing (1111x): UNKNOWN_ARGUMENT, MISSING_ARGUMENT, MISSING_VALUE, UNEXPECTED_POSITIONAL
    - values (1112x): INVALID_VALUE, OUT_OF_RANGE
    - queries (1113x): TYPE_MISMATCH
    - warnings (121xx): EMPTY_LIST, REPEATED_ARGUMENT
    """
    # --- naming errors (1110x) ---
    RESERVED_NAME               = 11101
    DUPLICATE_NAME              = 11102
    INVALID_NAME                = 11103
    INVALID_ARGUMENT            = 11104

    # --- parsing errors (1111x) ---
    UNKNOWN_ARGUMENT            = 11111
    MISSING_ARGUMENT            = 11112
    MISSING_VALUE               = 11113
    UNEXPECTED_POSITIONAL       = 11114

    # --- value errors (1112x) ---
    INVALID_VALUE               = 11121
    OUT_OF_RANGE                = 11122

    # --- query errors (1113x) ---
    TYPE_MISMATCH               = 11131

    # --- warnings (121xx) ---
    EMPTY_LIST                  = 12111
    REPEATED_ARGUMENT           = 12112

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _styler(options, styles):
    def styler(style):
        return styles[style] if options.get("colorful", True) else ""
    return styler


def _text(options):
    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not options.get("colorful", True):
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)
    return text


def _render(fault, palette):
    """
    build the rich renderable shared by exceptions and warnings.

    layout: "[ prog — code | title ]", the message, then a hint arrow line.
    """
    main = __import__("__main__")
    options = fault.options
    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))
    styler = _styler(options, styles)
    text = _text(options)

    prog = text(getattr(main, "__prog__", options.get("prog", "argy")), styler("prog-name"))
    code = options.get("code", fault.code)
    title = options.get("title", fault.title)

    header = Text.assemble(
        "[ ",
        prog,
        " — ",
        text(code.normalize(), styler("code")),
        " | ",
        text(title.title(), styler("title")),
        " ]"
    )
    body = [text(fault.message, styler("message"))]
    if hint := options.get("hint"):
        body.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))
    if docs := options.get("docs", getdoc(code)):
        body.append(text(docs, styler("docs")))

    if options.get("fancy", False):
        return Panel(Group(*body), title=header, title_align="left")

    return Group(header, *body)


def _replace(fault, overrides):
    """
    copy a fault with merged options, bypassing __init__.

    subclasses may define their own constructor signature and attributes;
    both survive the copy.
    """
    replaced = type(fault).__new__(type(fault), *fault.args)
    replaced.__dict__.update(fault.__dict__)
    replaced.options = MappingProxyType({**fault.options, **overrides})
    replaced.__cause__ = fault.__cause__
    return replaced


class ArgumentException(Exception):
    """
    base of every argy error.

    carries a message plus read-only options; the options that matter to
    renderers are code, title, hint and docs, and parse faults also record
    the argument label and offending token.
    """
    code = FaultCode.INVALID_ARGUMENT
    title = "argument error"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message if message is not Unset else ""
        self.options = MappingProxyType(options)

    @property
    def argument(self):
        return self.options.get("argument")

    @property
    def token(self):
        return self.options.get("token")

    def __str__(self):
        return self.message

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "title": "bold #FF4DA6",

            # body
            "message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
            "docs": "dim",
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from self.__cause__
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return _replace(self, overrides)


class ReservedNameError(ArgumentException):
    code = FaultCode.RESERVED_NAME
    title = "reserved name"


class DuplicateNameError(ArgumentException):
    code = FaultCode.DUPLICATE_NAME
    title = "duplicate name"


class InvalidNameError(ArgumentException):
    code = FaultCode.INVALID_NAME
    title = "invalid name"


class InvalidArgumentError(ArgumentException):
    code = FaultCode.INVALID_ARGUMENT
    title = "invalid argument"


class UnknownArgumentError(ArgumentException):
    code = FaultCode.UNKNOWN_ARGUMENT
    title = "unknown argument"


class MissingArgumentError(ArgumentException):
    code = FaultCode.MISSING_ARGUMENT
    title = "missing argument"


class MissingValueError(MissingArgumentError):
    code = FaultCode.MISSING_VALUE
    title = "missing value"


class UnexpectedPositionalArgumentError(ArgumentException):
    code = FaultCode.UNEXPECTED_POSITIONAL
    title = "unexpected positional"


class InvalidValueError(ArgumentException):
    code = FaultCode.INVALID_VALUE
    title = "invalid value"


class OutOfRangeError(ArgumentException):
    code = FaultCode.OUT_OF_RANGE
    title = "out of range"


class TypeMismatchError(ArgumentException):
    code = FaultCode.TYPE_MISMATCH
    title = "type mismatch"


class ArgumentWarning(ABC, Warning):
    """
    base of every argy warning (non-fatal parse conditions).
    """
    code = FaultCode.EMPTY_LIST
    title = "argument warning"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message if message is not Unset else ""
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",
            "title": "bold #FFC2E0",

            # body
            "message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
            "docs": "dim",
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return _replace(self, overrides)


class EmptyListWarning(ArgumentWarning):
    code = FaultCode.EMPTY_LIST
    title = "empty list"


class RepeatedArgumentWarning(ArgumentWarning):
    code = FaultCode.REPEATED_ARGUMENT
    title = "repeated argument"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via the rich console; otherwise
      exceptions are raised and warnings are issued through warnings.warn.

    typical options
    - prog, shell, fancy, colorful, hint, docs, argument, token.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "ArgumentException",
    "ReservedNameError",
    "DuplicateNameError",
    "InvalidNameError",
    "InvalidArgumentError",
    "UnknownArgumentError",
    "MissingArgumentError",
    "MissingValueError",
    "UnexpectedPositionalArgumentError",
    "InvalidValueError",
    "OutOfRangeError",
    "TypeMismatchError",
    "ArgumentWarning",
    "EmptyListWarning",
    "RepeatedArgumentWarning",
    "FaultCode",
    "trigger",
    "getdoc",
)
