"""
Argy value model.

A value is one of nine variants: absent (the Unset sentinel), a scalar
(int, float, bool, str) or a homogeneous list of one of those scalars. The
eight concrete variants are the members of Kind; absent is never a kind.

Kind owns everything that depends on the variant:
- resolution from Python annotations (int, list[int], ...),
- conformance of Python values (defaults supplied at registration),
- coercion of raw command-line tokens into typed values.

Coercion rules
- int: ASCII base-10 literal, optional sign. No locale, no underscores, no
  surrounding whitespace. Python ints are unbounded, so there is no overflow.
- float: decimal or exponential literal. A finite literal whose magnitude
  overflows to infinity is out of range.
- bool: "true" and "1" are True; anything else is False (never an error).
- str: returned unchanged.
- lists: the scalar rule applied element by element, order preserved.
"""
import enum
import math
import re
import types

from .faults import InvalidValueError, OutOfRangeError, FaultCode
from .utils import Unset

INTEGER = re.compile(r"[+-]?[0-9]+", re.ASCII)
DECIMAL = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?", re.ASCII)
NEGATIVE = re.compile(r"-([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?", re.ASCII)


def isnegative(token, /):
    """
    tell whether a token is a full negative-number literal ("-5", "-0.5", "-1e3").

    such tokens are values, never option markers.
    """
    return NEGATIVE.fullmatch(token) is not None


def _integer(name, raw):
    if not INTEGER.fullmatch(raw):
        raise InvalidValueError(
            "invalid integer %r for argument %r" % (raw, name),
            code=FaultCode.INVALID_VALUE,
            hint="pass a base-10 integer such as 42 or -7",
            argument=name,
            token=raw,
        )
    return int(raw)


def _decimal(name, raw):
    if not DECIMAL.fullmatch(raw):
        raise InvalidValueError(
            "invalid number %r for argument %r" % (raw, name),
            code=FaultCode.INVALID_VALUE,
            hint="pass a decimal number such as 0.5, -3 or 1e-3",
            argument=name,
            token=raw,
        )
    value = float(raw)
    if math.isinf(value):
        raise OutOfRangeError(
            "number %r for argument %r is too large" % (raw, name),
            code=FaultCode.OUT_OF_RANGE,
            hint="pass a number within the floating-point range",
            argument=name,
            token=raw,
        )
    return value


def _boolean(name, raw):
    return raw in ("true", "1")


def _string(name, raw):
    return raw


class Kind(enum.Enum):
    """
    the eight concrete argument kinds.

    each member's value is (element type, listed); members know how to check
    Python values and how to coerce raw tokens.
    """
    STRING = (str, False)
    INT = (int, False)
    FLOAT = (float, False)
    BOOL = (bool, False)
    STRINGS = (str, True)
    INTS = (int, True)
    FLOATS = (float, True)
    BOOLS = (bool, True)

    @property
    def element(self):
        return self.value[0]

    @property
    def listed(self):
        return self.value[1]

    @property
    def scalar(self):
        """the scalar kind of this kind's elements (itself for scalars)."""
        return Kind((self.element, False))

    @property
    def label(self):
        label = self.element.__name__
        return "list[%s]" % label if self.listed else label

    @classmethod
    def of(cls, annotation, /):
        """
        resolve a Python annotation (or a Kind) to a Kind.

        accepted: str, int, float, bool, list[str], list[int], list[float],
        list[bool] and the bare names "str", "int", ... as strings.
        """
        if isinstance(annotation, Kind):
            return annotation
        if isinstance(annotation, str):
            for kind in cls:
                if kind.label == annotation:
                    return kind
            raise TypeError("unsupported argument kind %r" % annotation)
        if isinstance(annotation, types.GenericAlias) and annotation.__origin__ is list:
            arguments = annotation.__args__
            if len(arguments) == 1 and arguments[0] in (str, int, float, bool):
                return cls((arguments[0], True))
        elif annotation in (str, int, float, bool):
            return cls((annotation, False))
        raise TypeError("unsupported argument kind %r" % (annotation,))

    def conforms(self, value, /):
        """
        tell whether a Python value may be stored under this kind.

        ints are accepted where floats are expected; bools are never ints.
        """
        if value is Unset:
            return False
        if self.listed:
            return isinstance(value, list | tuple) and all(map(self.scalar.conforms, value))
        match self.element.__name__:
            case "bool":
                return isinstance(value, bool)
            case "int":
                return isinstance(value, int) and not isinstance(value, bool)
            case "float":
                return isinstance(value, int | float) and not isinstance(value, bool)
            case _:
                return isinstance(value, str)

    def normalize(self, value, /):
        """
        return a conforming value in canonical form (floats widened, lists copied).
        """
        if not self.conforms(value):
            raise TypeError("%r is not a valid %s value" % (value, self.label))
        if self.listed:
            return [self.scalar.normalize(item) for item in value]
        if self is Kind.FLOAT:
            return float(value)
        return value

    def coerce(self, name, raw, /):
        """
        convert a raw token (scalars) or a list of raw tokens (lists).

        raises InvalidValueError/OutOfRangeError naming the argument and token.
        """
        convert = {
            int: _integer,
            float: _decimal,
            bool: _boolean,
            str: _string,
        }[self.element]
        if self.listed:
            return [convert(name, item) for item in raw]
        return convert(name, raw)

    def __repr__(self):
        return "Kind.%s" % self.name


def render(value, /):
    """
    human-readable form of a value for help text and messages.
    """
    if value is Unset:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list | tuple):
        return "[%s]" % ", ".join(repr(item) if isinstance(item, str) else render(item) for item in value)
    return str(value)


__all__ = (
    "Kind",
    "isnegative",
    "render",
)
