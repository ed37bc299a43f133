"""Configuration for the swiftstyle control statement rule."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Union

from swiftstyle.models import RuleDescription, Severity


class ConfigurationError(ValueError):
    """Raised when a rule option cannot be understood."""


# ── Rule Description ─────────────────────────────────────────────────────────
CONTROL_STATEMENT_RULE = RuleDescription(
    identifier="control_statement",
    name="Control Statement",
    description=(
        "`if`, `for`, `guard`, `switch`, `while`, and `catch` statements shouldn't "
        "unnecessarily wrap their conditionals or arguments in parentheses."
    ),
    kind="style",
)

# Keywords whose clause is checked, in scan order
CONTROL_KEYWORDS = ("if", "for", "guard", "switch", "while", "catch")

# ── Examples ─────────────────────────────────────────────────────────────────
# "↓" marks where a violation is reported; it is stripped before linting.
VIOLATION_MARKER = "↓"

NON_TRIGGERING_EXAMPLES = [
    "if condition {\n",
    "if (a, b) == (0, 1) {\n",
    "if (a || b) && (c || d) {\n",
    "if (min...max).contains(value) {\n",
    "if renderGif(data) {\n",
    "renderGif(data)\n",
    "for item in collection {\n",
    "for (key, value) in dictionary {\n",
    "for (index, value) in enumerate(array) {\n",
    "for var index = 0; index < 42; index++ {\n",
    "guard condition else {\n",
    "while condition {\n",
    "} while condition {\n",
    "do { ; } while condition {\n",
    "switch foo {\n",
    "do {\n} catch let error as NSError {\n}",
    "foo().catch(all: true) {}",
    "if max(a, b) < c {\n",
    "switch (lhs, rhs) {\n",
]

TRIGGERING_EXAMPLES = [
    "↓if (condition) {\n",
    "↓if(condition) {\n",
    "↓if (condition == endIndex) {\n",
    "↓if ((a || b) && (c || d)) {\n",
    "↓if ((min...max).contains(value)) {\n",
    "↓for (item in collection) {\n",
    "↓for (var index = 0; index < 42; index++) {\n",
    "↓for(item in collection) {\n",
    "↓for(var index = 0; index < 42; index++) {\n",
    "↓guard (condition) else {\n",
    "↓while (condition) {\n",
    "↓while(condition) {\n",
    "} ↓while (condition) {\n",
    "} ↓while(condition) {\n",
    "do { ; } ↓while(condition) {\n",
    "do { ; } ↓while (condition) {\n",
    "↓switch (foo) {\n",
    "do {\n} ↓catch(let error as NSError) {\n}",
    "↓if (max(a, b) < c) {\n",
]

CORRECTION_EXAMPLES = {
    "↓if (condition) {\n": "if condition {\n",
    "↓if(condition) {\n": "if condition {\n",
    "↓if (condition == endIndex) {\n": "if condition == endIndex {\n",
    "↓if ((a || b) && (c || d)) {\n": "if (a || b) && (c || d) {\n",
    "↓if ((min...max).contains(value)) {\n": "if (min...max).contains(value) {\n",
    "↓for (item in collection) {\n": "for item in collection {\n",
    "↓for (var index = 0; index < 42; index++) {\n": "for var index = 0; index < 42; index++ {\n",
    "↓for(item in collection) {\n": "for item in collection {\n",
    "↓for(var index = 0; index < 42; index++) {\n": "for var index = 0; index < 42; index++ {\n",
    "↓guard (condition) else {\n": "guard condition else {\n",
    "↓while (condition) {\n": "while condition {\n",
    "↓while(condition) {\n": "while condition {\n",
    "} ↓while (condition) {\n": "} while condition {\n",
    "} ↓while(condition) {\n": "} while condition {\n",
    "do { ; } ↓while(condition) {\n": "do { ; } while condition {\n",
    "do { ; } ↓while (condition) {\n": "do { ; } while condition {\n",
    "↓switch (foo) {\n": "switch foo {\n",
    "do {\n} ↓catch(let error as NSError) {\n}": "do {\n} catch let error as NSError {\n}",
    "↓if (max(a, b) < c) {\n": "if max(a, b) < c {\n",
}

# ── Inline Commands ──────────────────────────────────────────────────────────
# e.g. `// swiftstyle:disable:next control_statement`
COMMAND_PREFIX = "swiftstyle"
ALL_RULES = "all"

# ── Source Files ─────────────────────────────────────────────────────────────
SOURCE_EXTENSIONS = (".swift",)
SOURCE_ENCODING = "utf-8"

# ── Server Config ────────────────────────────────────────────────────────────
SERVER_NAME = "swiftstyle-mcp"
SERVER_VERSION = "0.1.0"
SERVER_HOST = "127.0.0.1"
SERVER_PORT = 8089


# ── Severity Option ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class SeverityConfiguration:
    """The single `severity` option of a rule."""

    severity: Severity = Severity.WARNING

    @classmethod
    def from_value(
        cls, value: Union[str, Severity, Mapping, None]
    ) -> "SeverityConfiguration":
        """Build a configuration from `"error"` or `{"severity": "error"}`.

        ``None`` yields the default configuration.
        """
        if value is None:
            return cls()
        if isinstance(value, Mapping):
            unknown = set(value) - {"severity"}
            if unknown:
                raise ConfigurationError(
                    f"Unknown option(s): {', '.join(sorted(unknown))}"
                )
            value = value.get("severity", Severity.WARNING)
        if isinstance(value, Severity):
            return cls(severity=value)
        if not isinstance(value, str):
            raise ConfigurationError(
                f"Severity must be a string, got {type(value).__name__}"
            )
        try:
            return cls(severity=Severity(value.strip().lower()))
        except ValueError as e:
            allowed = ", ".join(s.value for s in Severity)
            raise ConfigurationError(
                f"Invalid severity {value!r}; expected one of: {allowed}"
            ) from e
