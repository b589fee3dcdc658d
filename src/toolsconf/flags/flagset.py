"""
Flag sets with per-flag string setters.

A FlagSet registers typed flags, knows which of them were supplied
explicitly on the command line, and lets the config layer feed string values
into the remaining ones through each flag's own parser. Command line parsing
is delegated to argparse.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Callable, Iterator, Protocol, Sequence

from toolsconf.core.errors import ToolsConfError


class FlagValue(Protocol):
    """A flag value parsed from its string form."""

    def set(self, value: str) -> None:
        ...

    def type_name(self) -> str:
        ...

    def __str__(self) -> str:
        ...


class StringValue:
    def __init__(self, default: str = ""):
        self.value = default

    def set(self, value: str) -> None:
        self.value = value

    def type_name(self) -> str:
        return "string"

    def __str__(self) -> str:
        return self.value


class IntValue:
    def __init__(self, default: int = 0):
        self.value = default

    def set(self, value: str) -> None:
        self.value = int(value.strip())

    def type_name(self) -> str:
        return "int"

    def __str__(self) -> str:
        return str(self.value)


_TRUE = {"1", "t", "true"}
_FALSE = {"0", "f", "false"}


def parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"invalid boolean value {value!r}")


class BoolValue:
    def __init__(self, default: bool = False):
        self.value = default

    def set(self, value: str) -> None:
        self.value = parse_bool(value)

    def type_name(self) -> str:
        return "bool"

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(eq=False)
class Flag:
    """A registered flag; identity based so it can key binding tables."""

    name: str
    value: FlagValue
    usage: str = ""
    shorthand: str | None = None
    default: str = ""
    no_opt_value: str | None = None
    changed: bool = False


class _SetFlagAction(argparse.Action):
    """Routes an argparse value through the flag's own setter."""

    def __init__(self, option_strings, dest, flag_set: FlagSet, flag_name: str, **kwargs):
        self.flag_set = flag_set
        self.flag_name = flag_name
        super().__init__(option_strings, dest, **kwargs)

    def __call__(self, parser, namespace, values, option_string=None):
        try:
            self.flag_set.set(self.flag_name, values)
        except (ValueError, ToolsConfError) as e:
            parser.error(f"invalid argument {values!r} for {option_string}: {e}")
        setattr(namespace, self.dest, str(self.flag_set.lookup(self.flag_name).value))


UsageFormatter = Callable[[str], str]


class FlagSet:
    """Ordered collection of flags."""

    def __init__(self, name: str = ""):
        self.name = name
        self._flags: dict[str, Flag] = {}

    def __iter__(self) -> Iterator[Flag]:
        return iter(list(self._flags.values()))

    def __len__(self) -> int:
        return len(self._flags)

    def __contains__(self, name: str) -> bool:
        return name in self._flags

    def var(
        self,
        value: FlagValue,
        name: str,
        usage: str = "",
        shorthand: str | None = None,
        no_opt_value: str | None = None,
    ) -> Flag:
        if name in self._flags:
            raise ValueError(f"flag redefined: {name}")
        flag = Flag(
            name=name,
            value=value,
            usage=usage,
            shorthand=shorthand,
            default=str(value),
            no_opt_value=no_opt_value,
        )
        self._flags[name] = flag
        return flag

    def string_var(self, name: str, default: str = "", usage: str = "", shorthand: str | None = None) -> StringValue:
        value = StringValue(default)
        self.var(value, name, usage, shorthand)
        return value

    def int_var(self, name: str, default: int = 0, usage: str = "", shorthand: str | None = None) -> IntValue:
        value = IntValue(default)
        self.var(value, name, usage, shorthand)
        return value

    def bool_var(self, name: str, default: bool = False, usage: str = "", shorthand: str | None = None) -> BoolValue:
        value = BoolValue(default)
        self.var(value, name, usage, shorthand, no_opt_value="true")
        return value

    def lookup(self, name: str) -> Flag | None:
        return self._flags.get(name)

    def set(self, name: str, value: str) -> None:
        """Set a flag as if it was given on the command line."""
        flag = self._flags.get(name)
        if flag is None:
            raise KeyError(f"no such flag -{name}")
        flag.value.set(value)
        flag.changed = True

    def changed(self, name: str) -> bool:
        flag = self._flags.get(name)
        return flag is not None and flag.changed

    def add_flag_set(self, other: FlagSet) -> None:
        """Share other's flags; names already present are kept."""
        for flag in other:
            self._flags.setdefault(flag.name, flag)

    def add_to_parser(self, parser: argparse.ArgumentParser | argparse._ArgumentGroup) -> None:
        """Register every flag as an argparse option."""
        for flag in self:
            option_strings = [f"--{flag.name}"]
            if flag.shorthand:
                option_strings.append(f"-{flag.shorthand}")

            kwargs = {}
            if flag.no_opt_value is not None:
                kwargs["nargs"] = "?"
                kwargs["const"] = flag.no_opt_value

            parser.add_argument(
                *option_strings,
                dest=flag.name.replace("-", "_"),
                default=argparse.SUPPRESS,
                action=_SetFlagAction,
                flag_set=self,
                flag_name=flag.name,
                metavar=flag.name.upper().replace("-", "_"),
                help=f"{flag.usage} ({flag.value.type_name()})",
                **kwargs,
            )

    def parse(self, argv: Sequence[str]) -> list[str]:
        """Parse argv into the flags; returns arguments that are not flags."""
        parser = argparse.ArgumentParser(prog=self.name or None, add_help=False)
        self.add_to_parser(parser)
        _, remaining = parser.parse_known_args(list(argv))
        return remaining


__all__ = [
    "FlagValue",
    "StringValue",
    "IntValue",
    "BoolValue",
    "parse_bool",
    "Flag",
    "FlagSet",
    "UsageFormatter",
]
