"""
Argy name registry.

The registry maps every alias of every declared argument to one canonical key.

Naming rules
- "--name" declares a long form, "-n" a short form.
- a single undashed name declares a positional argument.
- several names must all be dashed (an undashed name among them is a typo for
  an option, not a second positional).
- the normalized name (dashes stripped) must look like a word: it starts with
  a letter or "_" and continues with letters, digits, "_" or "-". Names can
  therefore never be confused with negative numbers.
- "help" and "h" are reserved for the built-in help switch.

Lookups
- resolve(): dash-insensitive, any alias of any argument.
- resolve_long() / resolve_short(): form-specific, used when a marker is read
  from the command line. Positionals are never reachable through a marker.

Registration is two-phase: classify() runs every check without side effects,
commit() records the result. register() does both.
"""
import re
from collections import namedtuple

from .faults import (
    FaultCode,
    InvalidNameError,
    ReservedNameError,
    DuplicateNameError,
)

NAME = re.compile(r"[^\W\d][\w-]*")
RESERVED = frozenset(("help", "h"))

Registration = namedtuple("Registration", ("key", "names", "shorts", "longs", "positional"))


def normalize(name, /):
    """
    strip up to two leading dashes from an alias.

        >>> normalize("--count"), normalize("-c"), normalize("count")
        ('count', 'c', 'count')
    """
    if name.startswith("--"):
        return name[2:]
    if name.startswith("-"):
        return name[1:]
    return name


class Registry:
    """
    alias table for one parser.

    keys are canonical (first declared name, normalized); aliases map to keys;
    the positional order is the order in which positionals were registered.
    """

    def __init__(self):
        self._aliases = {}
        self._longs = {}
        self._shorts = {}
        self._positionals = []

    @property
    def positionals(self):
        return tuple(self._positionals)

    @property
    def aliases(self):
        return tuple(self._aliases)

    def __contains__(self, name):
        return isinstance(name, str) and normalize(name) in self._aliases

    def __len__(self):
        return len(set(self._aliases.values()))

    def classify(self, names, /):
        """
        validate a group of names and return its Registration, without
        recording anything.

        checks, in order: shape (InvalidNameError), reserved words
        (ReservedNameError), collisions (DuplicateNameError).
        """
        names = tuple(names)
        if not names:
            raise InvalidNameError(
                "an argument needs at least one name",
                code=FaultCode.INVALID_NAME,
                hint="declare a positional as 'name' or an option as '-n', '--name'",
            )

        normalized, shorts, longs = [], [], []
        positional = False
        for name in names:
            if not isinstance(name, str):
                raise InvalidNameError(
                    "argument names must be strings, not %s" % type(name).__name__,
                    code=FaultCode.INVALID_NAME,
                )
            if name.startswith("--"):
                form = longs
                if not name[2:]:
                    raise InvalidNameError(
                        "long form %r has no name after the dashes" % name,
                        code=FaultCode.INVALID_NAME,
                        hint="write it as '--name'",
                    )
            elif name.startswith("-"):
                form = shorts
                if not name[1:]:
                    raise InvalidNameError(
                        "short form %r has no name after the dash" % name,
                        code=FaultCode.INVALID_NAME,
                        hint="write it as '-n'",
                    )
            elif len(names) > 1:
                raise InvalidNameError(
                    "name %r lacks a dash but is declared together with other names" % name,
                    code=FaultCode.INVALID_NAME,
                    hint="write options as '-%s' or '--%s'; a positional takes exactly one name" % (name, name),
                )
            else:
                form = None
                positional = True

            stripped = normalize(name)
            if not NAME.fullmatch(stripped):
                raise InvalidNameError(
                    "invalid argument name %r" % name,
                    code=FaultCode.INVALID_NAME,
                    hint="names start with a letter or '_' and contain only letters, digits, '_' and '-'",
                )
            if form is not None:
                form.append(stripped)
            normalized.append(stripped)

        for name in normalized:
            if name in RESERVED:
                raise ReservedNameError(
                    "name %r is reserved for the help switch" % name,
                    code=FaultCode.RESERVED_NAME,
                    hint="'-h' and '--help' are always available; pick another name",
                )

        seen = set()
        for name in normalized:
            if name in self._aliases or name in seen:
                raise DuplicateNameError(
                    "name %r is already in use" % name,
                    code=FaultCode.DUPLICATE_NAME,
                    hint="every alias must be unique across all arguments",
                )
            seen.add(name)

        return Registration(normalized[0], tuple(normalized), tuple(shorts), tuple(longs), positional)

    def commit(self, registration, /):
        """record a Registration produced by classify(); returns its key."""
        key = registration.key
        for name in registration.names:
            self._aliases[name] = key
        for name in registration.longs:
            self._longs[name] = key
        for name in registration.shorts:
            self._shorts[name] = key
        if registration.positional:
            self._positionals.append(key)
        return key

    def register(self, names, /):
        """
        classify and record a group of names.

            >>> registry = Registry()
            >>> registry.register(["-c", "--count"])
            'c'
            >>> registry.resolve("--c"), registry.resolve("count")
            ('c', 'c')
        """
        return self.commit(self.classify(names))

    def resolve(self, name, /):
        """canonical key for any alias, with or without dashes; KeyError if unknown."""
        if not isinstance(name, str):
            raise TypeError("argument name must be a string, not %s" % type(name).__name__)
        return self._aliases[normalize(name)]

    def resolve_long(self, name, /):
        """canonical key for a long form (without its dashes); KeyError if unknown."""
        return self._longs[name]

    def resolve_short(self, name, /):
        """canonical key for a short form (without its dash); KeyError if unknown."""
        return self._shorts[name]


__all__ = (
    "Registry",
    "Registration",
    "normalize",
)
