"""
Target Definitions
==================

Each target fixes the textual conventions the emitter applies uniformly,
independent of the program being compiled.

| Name   | Triple              | Object format | Symbol prefix |
|--------|---------------------|---------------|---------------|
| linux  | x86_64-pc-linux-gnu | ELF           | (none)        |
| darwin | x86_64-apple-darwin | Mach-O        | _             |

Both use AT&T syntax and return int results in %eax.
"""

import sys
from dataclasses import dataclass

from subc.errors import UnknownTargetError


@dataclass(frozen=True)
class Target:
    """
    Assembly conventions for one target triple.

    Attributes:
        name: Short name used on the command line
        triple: Target triple
        symbol_prefix: Prepended to every global symbol
        description: Human readable summary
    """
    name: str
    triple: str
    symbol_prefix: str
    description: str

    def symbol(self, name: str) -> str:
        """Return the assembler symbol for a C-level name."""
        return f"{self.symbol_prefix}{name}"


LINUX = Target(
    name="linux",
    triple="x86_64-pc-linux-gnu",
    symbol_prefix="",
    description="x86-64 ELF (GNU as)",
)

DARWIN = Target(
    name="darwin",
    triple="x86_64-apple-darwin",
    symbol_prefix="_",
    description="x86-64 Mach-O (Apple as)",
)

TARGETS: dict[str, Target] = {
    LINUX.name: LINUX,
    DARWIN.name: DARWIN,
}


def get_target(name: str) -> Target:
    """
    Look up a target by name (case-insensitive).

    Raises:
        UnknownTargetError: If no target has that name
    """
    target = TARGETS.get(name.lower())
    if target is None:
        raise UnknownTargetError(name, sorted(TARGETS))
    return target


def host_target() -> Target:
    """Return the target matching the machine we are running on."""
    if sys.platform == "darwin":
        return DARWIN
    return LINUX
