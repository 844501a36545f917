# Copyright DataStax, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from __future__ import annotations

import warnings
from typing import TypeVar

from deprecation import DeprecatedWarning

T = TypeVar("T")

DEPRECATED_IN_VERSION = "0.1.0"
REMOVED_IN_VERSION = "1.0.0"


def check_deprecated_alias(
    *,
    new_value: T | None,
    deprecated_value: T | None,
    new_name: str,
    deprecated_name: str,
) -> T | None:
    """Generic blueprint utility for deprecating parameters through an alias.

    Normalize the two aliased parameter values, raising deprecation
    when needed and an error if both parameters are supplied.
    The returned value is the final one for the parameter.
    """

    if deprecated_value is None:
        return new_value

    the_warning = DeprecatedWarning(
        f"Parameter '{deprecated_name}'",
        deprecated_in=DEPRECATED_IN_VERSION,
        removed_in=REMOVED_IN_VERSION,
        details=f"Please use '{new_name}' instead.",
    )
    warnings.warn(
        the_warning,
        stacklevel=3,
    )

    if new_value is None:
        return deprecated_value
    else:
        msg = (
            f"Parameters `{new_name}` and `{deprecated_name}` "
            "(a deprecated alias for the former) cannot be passed at the same time."
        )
        raise ValueError(msg)
