"""Tests for parameter definitions and the environment builder."""

import pytest

from script_trigger.environment import build_environment
from script_trigger.parameters import (
    BooleanParameterDefinition,
    ChoiceParameterDefinition,
    FileParameterDefinition,
    ParameterError,
    PasswordParameterDefinition,
    PasswordParameterValue,
    StringParameterDefinition,
    TextParameterDefinition,
    parse_parameter,
    parse_parameters,
)


class TestBuildEnvironment:
    """Tests for build_environment."""

    def test_string_and_boolean(self):
        """Should contribute string and boolean defaults."""
        env = build_environment([
            StringParameterDefinition("FOO", default="bar"),
            BooleanParameterDefinition("FLAG", default=True),
        ])

        assert env == {"FOO": "bar", "FLAG": "true"}

    def test_boolean_false(self):
        """Booleans render lowercase."""
        env = build_environment([BooleanParameterDefinition("FLAG", default=False)])

        assert env == {"FLAG": "false"}

    def test_password(self):
        """Should contribute the secret value."""
        env = build_environment([PasswordParameterDefinition("TOKEN", default="s3cret")])

        assert env == {"TOKEN": "s3cret"}

    def test_none_is_empty(self):
        """No parameter definitions is not an error."""
        assert build_environment(None) == {}

    def test_empty_list_is_empty(self):
        assert build_environment([]) == {}

    def test_file_parameter_ignored(self):
        """Parameters without a default value contribute nothing."""
        env = build_environment([
            FileParameterDefinition("UPLOAD"),
            StringParameterDefinition("FOO", default="bar"),
        ])

        assert env == {"FOO": "bar"}

    def test_choice_uses_first_choice(self):
        env = build_environment([ChoiceParameterDefinition("ENV", choices=["dev", "prod"])])

        assert env == {"ENV": "dev"}

    def test_text_parameter(self):
        env = build_environment([TextParameterDefinition("NOTES", default="a\nb")])

        assert env == {"NOTES": "a\nb"}

    def test_last_declaration_wins(self):
        """Later declarations overwrite earlier ones with the same name."""
        env = build_environment([
            StringParameterDefinition("FOO", default="first"),
            BooleanParameterDefinition("FOO", default=False),
        ])

        assert env == {"FOO": "false"}


class TestParseParameter:
    """Tests for parsing parameter mappings."""

    def test_string_default_type(self):
        """Type defaults to string."""
        definition = parse_parameter({"name": "FOO", "default": "bar"})

        assert isinstance(definition, StringParameterDefinition)
        assert definition.default == "bar"

    def test_boolean_from_string(self):
        definition = parse_parameter({"name": "FLAG", "type": "boolean", "default": "true"})

        assert definition.default is True

    def test_boolean_invalid(self):
        with pytest.raises(ParameterError, match="boolean"):
            parse_parameter({"name": "FLAG", "type": "boolean", "default": "maybe"})

    def test_numeric_string_default(self):
        """Non-string defaults are stringified."""
        definition = parse_parameter({"name": "N", "type": "string", "default": 3})

        assert definition.default == "3"

    def test_unknown_type(self):
        with pytest.raises(ParameterError, match="unknown parameter type"):
            parse_parameter({"name": "X", "type": "run"})

    def test_missing_name(self):
        with pytest.raises(ParameterError, match="name is required"):
            parse_parameter({"type": "string"})

    def test_parse_parameters_keeps_order(self):
        definitions = parse_parameters([
            {"name": "A", "type": "string"},
            {"name": "B", "type": "password", "default": "x"},
        ])

        assert [d.name for d in definitions] == ["A", "B"]

    def test_parse_parameters_none(self):
        assert parse_parameters(None) == []

    def test_password_not_in_repr(self):
        """Secrets should not leak through repr."""
        value = PasswordParameterValue("TOKEN", "s3cret")
        definition = PasswordParameterDefinition("TOKEN", default="s3cret")

        assert "s3cret" not in repr(value)
        assert "s3cret" not in repr(definition)
