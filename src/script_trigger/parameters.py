# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Job parameter definitions and values.

A definition describes a parameter a job declares; its default value knows
how to contribute itself to an environment map. Only string-like, boolean and
password values contribute. File parameters have no default value.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class ParameterError(ValueError):
    """Raised when a parameter definition is malformed."""
    pass


# =============================================================================
# Values
# =============================================================================

@dataclass
class ParameterValue:
    """Base for a concrete parameter value."""
    name: str

    def build_environment(self, env: Dict[str, str]) -> None:
        """Values that do not map to an environment variable contribute nothing."""
        return None


@dataclass
class StringParameterValue(ParameterValue):
    value: str = ""

    def build_environment(self, env: Dict[str, str]) -> None:
        env[self.name] = self.value


@dataclass
class BooleanParameterValue(ParameterValue):
    value: bool = False

    def build_environment(self, env: Dict[str, str]) -> None:
        env[self.name] = "true" if self.value else "false"


@dataclass
class PasswordParameterValue(ParameterValue):
    value: str = field(default="", repr=False)

    def build_environment(self, env: Dict[str, str]) -> None:
        env[self.name] = self.value


# =============================================================================
# Definitions
# =============================================================================

@dataclass
class ParameterDefinition:
    """Base for a declared job parameter."""
    name: str
    description: str = ""

    def default_value(self) -> Optional[ParameterValue]:
        return None


@dataclass
class StringParameterDefinition(ParameterDefinition):
    default: str = ""

    def default_value(self) -> Optional[ParameterValue]:
        return StringParameterValue(self.name, self.default)


@dataclass
class TextParameterDefinition(StringParameterDefinition):
    """Multi-line string parameter."""
    pass


@dataclass
class ChoiceParameterDefinition(ParameterDefinition):
    choices: List[str] = field(default_factory=list)

    def default_value(self) -> Optional[ParameterValue]:
        # The first choice is the default
        if not self.choices:
            return None
        return StringParameterValue(self.name, self.choices[0])


@dataclass
class BooleanParameterDefinition(ParameterDefinition):
    default: bool = False

    def default_value(self) -> Optional[ParameterValue]:
        return BooleanParameterValue(self.name, self.default)


@dataclass
class PasswordParameterDefinition(ParameterDefinition):
    default: str = field(default="", repr=False)

    def default_value(self) -> Optional[ParameterValue]:
        return PasswordParameterValue(self.name, self.default)


@dataclass
class FileParameterDefinition(ParameterDefinition):
    """Uploaded file; only exists inside a build, so no default."""
    pass


PARAMETER_TYPES = {
    "string": StringParameterDefinition,
    "text": TextParameterDefinition,
    "choice": ChoiceParameterDefinition,
    "boolean": BooleanParameterDefinition,
    "password": PasswordParameterDefinition,
    "file": FileParameterDefinition,
}


def parse_bool(value: Any, field_name: str = "default") -> bool:
    """Accept a real boolean or the strings true/false, nothing else."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise ParameterError(f"boolean {field_name} must be true or false, got: {value!r}")


def parse_parameter(data: Dict[str, Any]) -> ParameterDefinition:
    """
    Build a ParameterDefinition from a YAML mapping.

    Example:
        >>> parse_parameter({"name": "FOO", "type": "string", "default": "bar"})
        StringParameterDefinition(name='FOO', description='', default='bar')
    """
    if not isinstance(data, dict):
        raise ParameterError(f"parameter must be a mapping, got: {data!r}")

    name = data.get("name")
    if not name or not isinstance(name, str):
        raise ParameterError("parameter name is required")

    kind = data.get("type", "string")
    cls = PARAMETER_TYPES.get(kind)
    if cls is None:
        raise ParameterError(f"unknown parameter type '{kind}' for {name}")

    description = data.get("description", "") or ""
    default = data.get("default")

    if cls is BooleanParameterDefinition:
        return cls(name, description, parse_bool(default) if default is not None else False)
    if cls is ChoiceParameterDefinition:
        choices = data.get("choices") or []
        if not isinstance(choices, list):
            raise ParameterError(f"choices for {name} must be a list")
        return cls(name, description, [str(c) for c in choices])
    if cls is FileParameterDefinition:
        return cls(name, description)
    return cls(name, description, "" if default is None else str(default))


def parse_parameters(items: Optional[List[Dict[str, Any]]]) -> List[ParameterDefinition]:
    """Parse a list of parameter mappings in declaration order."""
    if not items:
        return []
    if not isinstance(items, list):
        raise ParameterError("parameters must be a list")
    return [parse_parameter(item) for item in items]
