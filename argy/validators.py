"""
Argy stock validators.

Every factory returns a callable with the validator signature

    validator(name, value) -> None

which raises to reject and returns to accept. Validators run after coercion
(and after defaulting), so they receive typed values: a scalar, or a list for
list kinds, in which case each element is checked and the first offending
element is reported.

    >>> parser.add_int("-p", "--port", default=8080).in_range(1, 65535)
    >>> parser.add_string("--mode", default="fast").one_of("fast", "safe")
    >>> parser.add_string("--mac", default="").validate(optional(mac_address()))

in_range() rejects with OutOfRangeError; every other stock validator rejects
with InvalidValueError. The string checks also reject non-string values.
"""
import functools
import ipaddress
import os
import re
import urllib.parse
import uuid as _uuid

from .faults import FaultCode, InvalidValueError, OutOfRangeError
from .kinds import render
from .utils import rename

EMAIL = re.compile(r"[\w.%+-]+@[A-Za-z0-9-]+(\.[A-Za-z0-9-]+)*\.[A-Za-z]{2,}")
MAC = re.compile(r"[0-9A-Fa-f]{2}([:-])[0-9A-Fa-f]{2}(\1[0-9A-Fa-f]{2}){4}")


def _elementwise(check):
    """
    lift a per-element check(name, item) to scalars and lists alike.
    """
    @functools.wraps(check)
    def validator(name, value):
        if isinstance(value, list | tuple):
            for item in value:
                check(name, item)
        else:
            check(name, value)
    return validator


def _textual(check):
    """
    guard a per-element check that only makes sense for strings.
    """
    @functools.wraps(check)
    def guarded(name, value):
        if not isinstance(value, str):
            _reject(name, value, "a string", "attach this validator to a string argument")
        check(name, value)
    return _elementwise(guarded)


def _reject(name, value, what, hint=None):
    raise InvalidValueError(
        "argument %r: %s is not %s" % (name, render([value])[1:-1], what),
        code=FaultCode.INVALID_VALUE,
        hint=hint,
        argument=name,
        token=render(value),
    )


def in_range(low, high, /):
    """
    inclusive numeric bounds: low <= value <= high.

        >>> in_range(1, 50)("ids", [10, 20, 30])
        >>> in_range(1, 50)("ids", [10, 60])
        Traceback (most recent call last):
        ...
        argy.faults.OutOfRangeError: argument 'ids': 60 is outside [1, 50]
    """
    if low > high:
        raise ValueError("in_range() lower bound %r exceeds upper bound %r" % (low, high))

    @rename("in_range")
    @_elementwise
    def validator(name, value):
        if not low <= value <= high:
            raise OutOfRangeError(
                "argument %r: %s is outside [%s, %s]" % (name, render(value), render(low), render(high)),
                code=FaultCode.OUT_OF_RANGE,
                hint="pass a value between %s and %s (inclusive)" % (render(low), render(high)),
                argument=name,
                token=render(value),
            )
    return validator


def one_of(*choices):
    """value must equal one of the given choices."""
    if not choices:
        raise ValueError("one_of() requires at least one choice")

    @rename("one_of")
    @_elementwise
    def validator(name, value):
        if value not in choices:
            _reject(name, value, "an allowed choice", "choose one of %s" % render(list(choices))[1:-1])
    return validator


def matches(pattern, /):
    """string value must fully match a regular expression."""
    pattern = re.compile(pattern)

    @rename("matches")
    @_elementwise
    def validator(name, value):
        if not pattern.fullmatch(str(value)):
            _reject(name, value, "matching %r" % pattern.pattern)
    return validator


def email():
    @rename("email")
    @_textual
    def validator(name, value):
        if not EMAIL.fullmatch(value):
            _reject(name, value, "an email address", "for example: user@example.com")
    return validator


def url():
    """absolute URL with a scheme and a network location (http://host/...)."""
    @rename("url")
    @_textual
    def validator(name, value):
        try:
            parts = urllib.parse.urlsplit(value)
        except ValueError:
            parts = None
        if parts is None or not parts.scheme or not parts.netloc or any(map(str.isspace, value)):
            _reject(name, value, "a URL", "for example: https://example.com/path")
    return validator


def _address(version, what, hint):
    def check(name, value):
        try:
            address = ipaddress.ip_address(value)
        except ValueError:
            _reject(name, value, what, hint)
        else:
            if version and address.version != version:
                _reject(name, value, what, hint)
    return check


def ip_address():
    """IPv4 or IPv6 address."""
    return rename(_textual(_address(0, "an IP address", "for example: 192.168.1.1 or ::1")), "ip_address")


def ipv4():
    return rename(_textual(_address(4, "an IPv4 address", "for example: 192.168.1.1")), "ipv4")


def ipv6():
    return rename(_textual(_address(6, "an IPv6 address", "for example: 2001:db8::1")), "ipv6")


def mac_address():
    """six hex octets separated consistently by ':' or '-'."""
    @rename("mac_address")
    @_textual
    def validator(name, value):
        if not MAC.fullmatch(value):
            _reject(name, value, "a MAC address", "for example: 00:1A:2B:3C:4D:5E")
    return validator


def alpha():
    @rename("alpha")
    @_textual
    def validator(name, value):
        if not value.isalpha():
            _reject(name, value, "alphabetic")
    return validator


def numeric():
    """ASCII digits only (no sign, no decimal point)."""
    @rename("numeric")
    @_textual
    def validator(name, value):
        if not (value.isascii() and value.isdigit()):
            _reject(name, value, "numeric")
    return validator


def alphanumeric():
    @rename("alphanumeric")
    @_textual
    def validator(name, value):
        if not value.isalnum():
            _reject(name, value, "alphanumeric")
    return validator


def uuid():
    """canonical 8-4-4-4-12 hex UUID."""
    @rename("uuid")
    @_textual
    def validator(name, value):
        try:
            canonical = str(_uuid.UUID(value))
        except ValueError:
            canonical = None
        if canonical != value.lower():
            _reject(name, value, "a UUID", "for example: 123e4567-e89b-12d3-a456-426614174000")
    return validator


def file():
    """existing regular file."""
    @rename("file")
    @_textual
    def validator(name, value):
        if not os.path.isfile(value):
            _reject(name, value, "an existing file")
    return validator


def directory():
    """existing directory."""
    @rename("directory")
    @_textual
    def validator(name, value):
        if not os.path.isdir(value):
            _reject(name, value, "an existing directory")
    return validator


def path():
    """existing file or directory."""
    @rename("path")
    @_textual
    def validator(name, value):
        if not os.path.exists(value):
            _reject(name, value, "an existing path")
    return validator


def optional(validator, /):
    """
    skip a validator for empty strings, so an empty default means "not set".
    """
    if not callable(validator):
        raise TypeError("optional() argument must be callable")

    @rename("optional")
    def wrapper(name, value):
        if value == "" or value == []:
            return
        validator(name, value)
    return wrapper


__all__ = (
    "in_range",
    "one_of",
    "matches",
    "email",
    "url",
    "ip_address",
    "ipv4",
    "ipv6",
    "mac_address",
    "alpha",
    "numeric",
    "alphanumeric",
    "uuid",
    "file",
    "directory",
    "path",
    "optional",
)
