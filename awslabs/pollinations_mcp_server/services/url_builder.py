# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Request URL construction for the Pollinations.ai endpoints.

Query parameters are appended from an ordered list of rules so the produced URLs
are reproducible. Boolean options only ever appear as ``name=true``.
"""

import re
from awslabs.pollinations_mcp_server.consts import (
    ENGLISH_CHARACTERS,
    MAX_CONCISE_PROMPT_LENGTH,
    MAX_NON_ENGLISH_RATIO,
    URI_COMPONENT_SAFE,
)
from awslabs.pollinations_mcp_server.models.pollinations_models import (
    ImageGenerationParams,
    TextGenerationParams,
)
from pydantic import BaseModel
from typing import List, NamedTuple, Sequence
from urllib.parse import quote


ENGLISH_TEXT_PATTERN = re.compile(f'[{ENGLISH_CHARACTERS}]+')
ENGLISH_CHARACTER_PATTERN = re.compile(f'[{ENGLISH_CHARACTERS}]')

NOT_ENGLISH_ADVISORY = (
    'Tip: Pollinations.ai understands English prompts better. '
    'Consider writing the prompt in English.'
)
NOT_CONCISE_ADVISORY = (
    'Tip: long prompts can hurt the result. Keep the prompt short and precise '
    f'(at most {MAX_CONCISE_PROMPT_LENGTH} characters is recommended).'
)


class QueryRule(NamedTuple):
    """How one parameter is rendered into the query string.

    Attributes:
        name: Query parameter name.
        attribute: Attribute of the parameter record holding the value.
        encode: Percent-encode the value.
        flag: Boolean option, rendered as ``name=true`` only when set.
    """
    name: str
    attribute: str
    encode: bool = False
    flag: bool = False


IMAGE_QUERY_RULES = (
    QueryRule('width', 'width'),
    QueryRule('height', 'height'),
    QueryRule('seed', 'seed'),
    QueryRule('model', 'model'),
    QueryRule('nologo', 'nologo', flag=True),
    QueryRule('enhance', 'enhance', flag=True),
    QueryRule('safe', 'safe', flag=True),
    QueryRule('private', 'private', flag=True),
)

TEXT_QUERY_RULES = (
    QueryRule('model', 'model'),
    QueryRule('seed', 'seed'),
    QueryRule('json', 'json_mode', flag=True),
    QueryRule('system', 'system', encode=True),
    QueryRule('private', 'private', flag=True),
)


def encode_component(value: str) -> str:
    """Percent-encode a path segment or query value."""
    return quote(value, safe=URI_COMPONENT_SAFE)


def append_query(url: str, params: BaseModel, rules: Sequence[QueryRule]) -> str:
    """Append query parameters to a URL following the given rules in order.

    Values that are None or empty strings are skipped, as are flags that are not set.

    Args:
        url: URL without a query string.
        params: Parameter record the values are read from.
        rules: Rules in the order the parameters must appear.

    Returns:
        The URL with its query string.
    """
    pairs: List[str] = []
    for rule in rules:
        value = getattr(params, rule.attribute)
        if rule.flag:
            if value:
                pairs.append(f'{rule.name}=true')
            continue
        if value is None or value == '':
            continue
        text = str(value)
        if rule.encode:
            text = encode_component(text)
        pairs.append(f'{rule.name}={text}')
    if not pairs:
        return url
    return f"{url}?{'&'.join(pairs)}"


def build_image_url(params: ImageGenerationParams, base_url: str) -> str:
    """Build the image generation URL.

    Args:
        params: Validated image generation parameters.
        base_url: Base URL of the image service.

    Returns:
        ``{base_url}/prompt/{prompt}?width=..&height=..`` followed by the optional parameters.
    """
    url = f"{base_url.rstrip('/')}/prompt/{encode_component(params.prompt)}"
    return append_query(url, params, IMAGE_QUERY_RULES)


def build_text_url(params: TextGenerationParams, base_url: str) -> str:
    """Build the GET-style text generation URL.

    Args:
        params: Validated text generation parameters.
        base_url: Base URL of the text service.

    Returns:
        ``{base_url}/{prompt}?model=..`` followed by the optional parameters.
    """
    url = f"{base_url.rstrip('/')}/{encode_component(params.prompt)}"
    return append_query(url, params, TEXT_QUERY_RULES)


def is_mainly_english(text: str) -> bool:
    """Tell whether a prompt is mostly made of English characters.

    A prompt made only of letters, digits, whitespace and common punctuation is
    English. Otherwise it is still treated as English when fewer than 20% of its
    characters fall outside that set.
    """
    if not text or ENGLISH_TEXT_PATTERN.fullmatch(text):
        return True
    non_english = sum(1 for char in text if not ENGLISH_CHARACTER_PATTERN.match(char))
    return non_english / len(text) < MAX_NON_ENGLISH_RATIO


def is_concise(text: str) -> bool:
    """Tell whether a prompt is short enough to be rendered faithfully."""
    return len(text) <= MAX_CONCISE_PROMPT_LENGTH


def prompt_feedback(prompt: str) -> List[str]:
    """Return advisory notes about a prompt; never blocks generation."""
    feedback = []
    if not is_mainly_english(prompt):
        feedback.append(NOT_ENGLISH_ADVISORY)
    if not is_concise(prompt):
        feedback.append(NOT_CONCISE_ADVISORY)
    return feedback
