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

# Reserved query parameter names understood by the CRUD service
MONGO_QUERY_PARAM = "_q"
LIMIT_PARAM = "_l"
PROJECTION_PARAM = "_p"
SKIP_PARAM = "_sk"
SORT_PARAM = "_s"

# Sub-paths of the collection endpoints
COUNT_PATH = "count"
EXPORT_PATH = "export"
BULK_PATH = "bulk"
UPSERT_ONE_PATH = "upsert-one"
HEALTHZ_PATH = "/-/healthz"

# Defaults/settings for requests
DEFAULT_REQUEST_TIMEOUT_MS = 10000
JSON_CONTENT_TYPE = "application/json"
ALLOWED_URL_SCHEMES = {"http", "https"}

# Message used when the service replies with an error and no body at all
EMPTY_ERROR_BODY_MESSAGE = "error body from crud-service is empty"

# Settings for redacting secrets in logging
FIXED_SECRET_PLACEHOLDER = "***"
DEFAULT_REDACTED_HEADER_NAMES = {
    "Authorization",
    "Cookie",
    "Proxy-Authorization",
    "Secret",
    "X-Api-Key",
}
