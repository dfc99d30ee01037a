"""Operator input providers.

Pipeline decisions that may need a human (version, new-game details,
ambiguous entry point) go through an ``InputProvider`` so they work the same
with a terminal, with pre-supplied values, or with plain defaults.

Keys used by the pipeline: ``version``, ``name``, ``type``, ``description``
and ``entry_point``.
"""

import os
import sys
from typing import Callable, Mapping, Protocol, runtime_checkable

# Environment variables that pre-supply answers for non-interactive runs
ENV_OVERRIDES = {
    "name": "GAME_NAME",
    "type": "GAME_TYPE",
    "description": "GAME_DESCRIPTION",
    "entry_point": "GAME_ENTRY_POINT",
}


@runtime_checkable
class InputProvider(Protocol):
    """Anything that can answer a keyed question."""

    def ask(self, key: str, message: str, default: str = "") -> str:
        """Return the answer for ``key``; ``default`` when nothing is given."""
        ...


class DefaultInputProvider:
    """Always answers with the default. Used when stdin is not a terminal."""

    def ask(self, key: str, message: str, default: str = "") -> str:
        return default


class InteractiveInputProvider:
    """Prompts on the terminal; an empty answer means the default."""

    def __init__(self, reader: Callable[[str], str] = input):
        self._reader = reader

    def ask(self, key: str, message: str, default: str = "") -> str:
        suffix = f" [{default}]" if default else ""
        try:
            answer = self._reader(f"{message}{suffix}: ").strip()
        except EOFError:
            answer = ""
        return answer or default


class PresetInputProvider:
    """Answers from a mapping first and defers to a fallback otherwise."""

    def __init__(
        self,
        values: Mapping[str, str | None],
        fallback: InputProvider | None = None,
    ):
        self.values = {key: value for key, value in values.items() if value}
        self.fallback = fallback or DefaultInputProvider()

    def has(self, key: str) -> bool:
        return key in self.values

    def ask(self, key: str, message: str, default: str = "") -> str:
        if key in self.values:
            return self.values[key]  # type: ignore[return-value]
        return self.fallback.ask(key, message, default)


def env_overrides(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Collect pre-supplied answers from GAME_* environment variables."""
    environ = os.environ if environ is None else environ
    return {
        key: environ[var]
        for key, var in ENV_OVERRIDES.items()
        if environ.get(var)
    }


def build_input_provider(
    overrides: Mapping[str, str | None] | None = None,
    interactive: bool | None = None,
) -> PresetInputProvider:
    """Layer explicit overrides and env overrides over a terminal or defaults.

    Args:
        overrides: Values from CLI options; these win over the environment
        interactive: Force prompting on or off; defaults to stdin being a tty
    """
    if interactive is None:
        interactive = sys.stdin.isatty()

    values: dict[str, str | None] = dict(env_overrides())
    for key, value in (overrides or {}).items():
        if value:
            values[key] = value

    fallback: InputProvider = InteractiveInputProvider() if interactive else DefaultInputProvider()
    return PresetInputProvider(values, fallback)
