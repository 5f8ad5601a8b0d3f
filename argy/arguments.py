r"""
Argy argument descriptors and builders.

Overview
- Argument: metadata and parse state for one declared argument (positional or
  optional). Created by the parser during registration, mutated only by
  Parser.parse(), read-only for everybody else.
- Builder: the fluent handle returned by Parser.add(...). It holds the
  canonical key and a reference to the owning parser, never the descriptor
  itself, and attaches validators through the parser.

Introspection & representation
- ArgumentType metaclass exposes the fields listed in __introspectable__ as
  read-only properties (via mirror()) and provides stable __repr__ and
  __rich_repr__ implementations.

Quick example:
    >>> parser = Parser(["prog", "--count", "7"])
    >>> parser.add_int("-c", "--count", help="Count", default=10).in_range(1, 100)
    >>> parser.parse().get_int("count")
    7
"""
import functools
import operator
import re

from .kinds import Kind, render
from .utils import *
from . import validators


class ArgumentType(type):
    """
    Metaclass that turns descriptor classes into introspectable records.

    Responsibilities
    - Expose every name listed in __introspectable__ as a read-only property
      mirroring the private "_name" field.
    - Provide a compact __repr__ and a __rich_repr__ for pretty printers.

    Conventions
    - __typename__ is derived from the class name (camel-case split with
      hyphens) and used in messages.
    - __displayable__ (if set) narrows which properties __rich_repr__ shows.
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
                name: mirror(name, frozen=name in namespace.get("__frozen__", ()))
                for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise representation with key metadata.

            Example
            - argument(key='count', names=('c', 'count'), kind=Kind.INT, ...)
            """
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class Argument(metaclass=ArgumentType):
    """
    One declared argument: its names, kind, default and parse state.

    Fields (read-only properties)
    - key: canonical key, the first declared name without dashes.
    - names: every alias without dashes, in declaration order.
    - shorts / longs: aliases declared with one dash / two dashes.
    - help: free text.
    - kind: the declared Kind.
    - default: default value, or Unset.
    - value: parsed value, Unset until parse() fills it.
    - required: no default and not a boolean.
    - positional: declared with a single undashed name.
    - provided: occurred on the command line during the last parse.
    - validators: attached validators, in attachment order.

    Invariant: default and value, when not Unset, conform to kind.
    """

    __introspectable__ = (
        "key",
        "names",
        "shorts",
        "longs",
        "help",
        "kind",
        "default",
        "value",
        "required",
        "positional",
        "provided",
        "validators",
    )

    __displayable__ = (
        "key",
        "names",
        "kind",
        "default",
        "value",
        "required",
        "positional",
    )

    __frozen__ = ("names", "shorts", "longs", "validators")

    def __init__(self, key, names, shorts, longs, kind, *, help="", default=Unset, positional=False):
        if not isinstance(help, str):
            raise TypeError(f"{type(self).__typename__} 'help' must be a string")
        self._key = key
        self._names = list(names)
        self._shorts = list(shorts)
        self._longs = list(longs)
        self._help = help.strip()
        self._kind = kind
        self._default = default
        self._value = Unset
        self._positional = positional
        self._provided = False
        self._validators = []
        # booleans are never required: absence means "not set"
        self._required = default is Unset and kind is not Kind.BOOL

    @property
    def label(self):
        """
        display name used in messages and help: the first long form (dashed),
        else the first short form, else the positional name.
        """
        if self._positional:
            return self._key
        if self._longs:
            return "--" + self._longs[0]
        return "-" + self._shorts[0]

    @property
    def flags(self):
        """dashed spellings, shorts first (for help rendering)."""
        return tuple(["-" + name for name in self._shorts] + ["--" + name for name in self._longs])

    def describe(self):
        """
        renderer-facing summary of this descriptor.
        """
        return {
            "names": self.names,
            "shorts": self.shorts,
            "longs": self.longs,
            "help": self.help,
            "required": self.required,
            "kind": self.kind,
            "default": render(self._default),
            "positional": self.positional,
        }


class Builder:
    """
    Fluent handle returned by Parser.add(...).

    The builder owns only the canonical key; every call goes through the
    parser's registry, so it never aliases a descriptor. Each method returns
    the builder itself for chaining:

        parser.add_ints("-i", "--ids", help="ids", default=[1]).in_range(1, 50)
    """
    __slots__ = ("_parser", "_key")

    def __init__(self, parser, key):
        self._parser = parser
        self._key = key

    @property
    def key(self):
        return self._key

    @property
    def argument(self):
        return self._parser.argument(self._key)

    def validate(self, validator, /):
        """
        attach a validator called as validator(name, value) after coercion.

        validators chain: every attached validator runs, in attachment order.
        """
        self._parser.validate(self._key, validator)
        return self

    def in_range(self, low, high, /):
        return self.validate(validators.in_range(low, high))

    def one_of(self, *choices):
        return self.validate(validators.one_of(*choices))

    def matches(self, pattern, /):
        return self.validate(validators.matches(pattern))

    def email(self):
        return self.validate(validators.email())

    def url(self):
        return self.validate(validators.url())

    def ip_address(self):
        return self.validate(validators.ip_address())

    def ipv4(self):
        return self.validate(validators.ipv4())

    def ipv6(self):
        return self.validate(validators.ipv6())

    def mac_address(self):
        return self.validate(validators.mac_address())

    def alpha(self):
        return self.validate(validators.alpha())

    def numeric(self):
        return self.validate(validators.numeric())

    def alphanumeric(self):
        return self.validate(validators.alphanumeric())

    def uuid(self):
        return self.validate(validators.uuid())

    def file(self):
        return self.validate(validators.file())

    def directory(self):
        return self.validate(validators.directory())

    def path(self):
        return self.validate(validators.path())

    def __repr__(self):
        return f"builder(key={self._key!r})"


__all__ = (
    "Argument",
    "Builder",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del ArgumentType
