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
"""Pollinations.ai text service implementation.

This module provides single-prompt (GET) and conversation (POST) text generation
and the model catalog lookup. Each call is one synchronous round trip.
"""

import httpx
import json
from awslabs.pollinations_mcp_server.models.common import ServerSettings, text_result
from awslabs.pollinations_mcp_server.models.pollinations_models import (
    TextChatParams,
    TextGenerationParams,
)
from awslabs.pollinations_mcp_server.services.pollinations_common import fetch
from awslabs.pollinations_mcp_server.services.url_builder import build_text_url
from loguru import logger
from mcp.types import CallToolResult


def render_response_body(response: httpx.Response) -> str:
    """Return JSON responses pretty-printed and anything else as raw text."""
    content_type = response.headers.get('content-type', '')
    if 'json' in content_type:
        try:
            return json.dumps(response.json(), indent=2, ensure_ascii=False)
        except ValueError:
            logger.warning('Response declared JSON but could not be parsed, returning raw text')
    return response.text


async def generate_text(
    params: TextGenerationParams,
    client: httpx.AsyncClient,
    settings: ServerSettings,
) -> CallToolResult:
    """Generate text from a single prompt.

    Args:
        params: Validated text generation parameters.
        client: The HTTP client.
        settings: Server settings holding the text base URL.

    Returns:
        CallToolResult with the generated text.

    Raises:
        RemoteAPIError: If the service call fails.
    """
    logger.info(
        f'Generating text with model: {params.model}',
        extra={
            'seed': params.seed,
            'json': params.json_mode,
            'has_system': params.system is not None,
            'prompt_length': len(params.prompt),
        },
    )
    url = build_text_url(params, settings.text_base_url)
    response = await fetch(client, 'GET', url)
    return text_result(render_response_body(response))


async def generate_text_chat(
    params: TextChatParams,
    client: httpx.AsyncClient,
    settings: ServerSettings,
) -> CallToolResult:
    """Generate the next reply of a conversation.

    Args:
        params: Validated chat parameters.
        client: The HTTP client.
        settings: Server settings holding the text base URL.

    Returns:
        CallToolResult with the generated reply.

    Raises:
        RemoteAPIError: If the service call fails.
    """
    logger.info(
        f'Generating chat reply with model: {params.model}',
        extra={'messages_count': len(params.messages), 'json': params.json_mode},
    )
    response = await fetch(
        client,
        'POST',
        f'{settings.text_base_url}/',
        json_body=params.to_request_body(),
    )
    return text_result(render_response_body(response))


async def list_text_models(
    client: httpx.AsyncClient,
    settings: ServerSettings,
) -> CallToolResult:
    """Return the catalog of available text models."""
    logger.debug('Listing text models')
    response = await fetch(client, 'GET', f'{settings.text_base_url}/models')
    return text_result(render_response_body(response))
