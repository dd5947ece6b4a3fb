# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Environment for the trigger script, derived from job parameter defaults."""

import logging
from typing import Dict, Iterable, Optional

from script_trigger.parameters import (
    BooleanParameterValue,
    ParameterDefinition,
    PasswordParameterValue,
    StringParameterValue,
)

logger = logging.getLogger(__name__)

# Value kinds allowed to reach the script environment
CONTRIBUTING_VALUES = (StringParameterValue, BooleanParameterValue, PasswordParameterValue)


def build_environment(
    definitions: Optional[Iterable[ParameterDefinition]],
) -> Dict[str, str]:
    """
    Build the script environment from parameter definitions.

    The trigger runs outside any build, so each parameter contributes its
    default value. Later declarations overwrite earlier ones with the same name.

    Args:
        definitions: Declared parameters of the job, or None

    Returns:
        Flat name -> value map (empty when nothing is declared)
    """
    env: Dict[str, str] = {}
    if not definitions:
        return env

    for definition in definitions:
        value = definition.default_value()
        if isinstance(value, CONTRIBUTING_VALUES):
            value.build_environment(env)
        else:
            logger.debug(f"Parameter {definition.name} does not contribute to the environment")

    return env
