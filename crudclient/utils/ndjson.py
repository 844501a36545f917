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

import json
from typing import Any, Iterator

from crudclient.exceptions import UnexpectedCrudResponseException

_decoder = json.JSONDecoder()


def iter_json_values(text: str) -> Iterator[Any]:
    """
    Decode a stream of JSON values separated by whitespace (typically one
    per line), yielding them in order.

    Reaching the end of the input is the normal termination. A value that is
    truncated or otherwise not valid JSON raises an
    UnexpectedCrudResponseException.
    """

    position = 0
    text_length = len(text)
    while True:
        while position < text_length and text[position].isspace():
            position += 1
        if position >= text_length:
            return
        try:
            value, position = _decoder.raw_decode(text, position)
        except json.JSONDecodeError as exc:
            raise UnexpectedCrudResponseException(
                text=f"Unparseable item in the exported stream: {exc}",
                raw_response=text,
            ) from exc
        yield value


def decode_json_values(text: str) -> list[Any]:
    return list(iter_json_values(text))
