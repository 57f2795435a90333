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
"""Pollinations.ai MCP Server implementation."""

import os
import sys
from awslabs.pollinations_mcp_server.consts import (
    DEFAULT_ENHANCE,
    DEFAULT_HEIGHT,
    DEFAULT_IMAGE_MODEL,
    DEFAULT_JSON_MODE,
    DEFAULT_NOLOGO,
    DEFAULT_OUTPUT_PATH,
    DEFAULT_PRIVATE,
    DEFAULT_SAFE,
    DEFAULT_TEXT_MODEL,
    DEFAULT_WIDTH,
    PROMPT_INSTRUCTIONS,
    TEXT_INSTRUCTIONS,
    TOOL_DOWNLOAD_IMAGE,
    TOOL_GENERATE_IMAGE,
    TOOL_GENERATE_TEXT,
    TOOL_GENERATE_TEXT_CHAT,
    TOOL_LIST_TEXT_MODELS,
)
from awslabs.pollinations_mcp_server.dispatcher import ToolDispatcher
from awslabs.pollinations_mcp_server.models.common import ServerSettings, result_text
from awslabs.pollinations_mcp_server.models.pollinations_models import ChatMessage
from contextlib import asynccontextmanager
from loguru import logger
from mcp.server.fastmcp import Context, FastMCP
from mcp.types import CallToolRequest, CallToolResult
from pydantic import Field, StrictBool, StrictInt, StrictStr
from typing import Any, AsyncIterator, Dict, List, Optional


# Logging
logger.remove()
logger.add(sys.stderr, level=os.getenv('FASTMCP_LOG_LEVEL', 'WARNING'))


settings = ServerSettings.from_env()
dispatcher = ToolDispatcher(settings)


@asynccontextmanager
async def server_lifespan(server: FastMCP) -> AsyncIterator[None]:
    """Keep the dispatcher open while a session is running."""
    async with dispatcher.session():
        yield


mcp = FastMCP(
    'awslabs-pollinations-mcp-server',
    instructions=f"""
# Pollinations.ai Image and Text Generation

This MCP server provides tools for generating images and text with Pollinations.ai.

## Available Tools

- **generate_image**: Build a Pollinations.ai image URL for a text prompt.
- **download_image**: Download a generated image to a local file.
- **generate_text**: Generate text from a single prompt.
- **generate_text_chat**: Generate the next reply of a conversation.
- **list_text_models**: List the available text models.

## Image Prompt Best Practices

{PROMPT_INSTRUCTIONS}

## Text Generation

{TEXT_INSTRUCTIONS}
""",
    lifespan=server_lifespan,
)


def reject_unknown_tools(server: FastMCP) -> None:
    """Answer calls to unregistered tools with a METHOD_NOT_FOUND protocol error.

    FastMCP reports unknown tools as a failed tool result; the name is checked
    against the dispatcher before the call reaches FastMCP.
    """
    handlers = server._mcp_server.request_handlers
    call_tool_handler = handlers[CallToolRequest]

    async def handler(request: CallToolRequest):
        dispatcher.require_tool(request.params.name)
        return await call_tool_handler(request)

    handlers[CallToolRequest] = handler


reject_unknown_tools(mcp)


async def run_tool(ctx: Context, name: str, arguments: Dict[str, Any]) -> CallToolResult:
    """Run a tool through the dispatcher and report failures to the client.

    The dispatcher's response is returned as is, including failures.
    """
    result = await dispatcher.call_tool(name, arguments)
    if result.isError:
        await ctx.error(result_text(result))
    return result


@mcp.tool(name=TOOL_GENERATE_IMAGE, structured_output=False)
async def mcp_generate_image(
    ctx: Context,
    prompt: StrictStr = Field(description='The text description of the image to generate'),
    width: StrictInt = Field(default=DEFAULT_WIDTH, description='Image width in pixels'),
    height: StrictInt = Field(default=DEFAULT_HEIGHT, description='Image height in pixels'),
    seed: Optional[StrictInt] = Field(
        default=None, description='Seed for reproducible generation'
    ),
    model: StrictStr = Field(
        default=DEFAULT_IMAGE_MODEL, description='Model to use (e.g. flux, turbo)'
    ),
    nologo: StrictBool = Field(default=DEFAULT_NOLOGO, description='Remove the watermark'),
    enhance: StrictBool = Field(
        default=DEFAULT_ENHANCE, description='Let the service enhance the prompt for more detail'
    ),
    safe: StrictBool = Field(default=DEFAULT_SAFE, description='Enable the content safety filter'),
    private: StrictBool = Field(
        default=DEFAULT_PRIVATE, description='Keep the image out of the public feed'
    ),
) -> CallToolResult:
    """Generate an image with Pollinations.ai and return its URL.

    The image is rendered by the service when the URL is opened. Use download_image
    to save it locally.

    ## Prompt Best Practices

    - Write prompts in English; other languages work but are understood less well.
    - Keep prompts under 200 characters.
    - Reuse a `seed` to refine a prompt, then vary it to get variations.

    Returns:
        Prompt advisories (if any) followed by a JSON block with the URL and parameters.
    """
    logger.debug(
        f"MCP tool generate_image called with prompt: '{prompt[:30]}...', dims: {width}x{height}"
    )
    return await run_tool(
        ctx,
        TOOL_GENERATE_IMAGE,
        {
            'prompt': prompt,
            'width': width,
            'height': height,
            'seed': seed,
            'model': model,
            'nologo': nologo,
            'enhance': enhance,
            'safe': safe,
            'private': private,
        },
    )


@mcp.tool(name=TOOL_DOWNLOAD_IMAGE, structured_output=False)
async def mcp_download_image(
    ctx: Context,
    url: StrictStr = Field(description='URL of the image to download'),
    output_path: StrictStr = Field(
        default=DEFAULT_OUTPUT_PATH,
        description='Where to save the image, including the file name, relative to the download directory',
    ),
) -> CallToolResult:
    """Download a Pollinations.ai image to a local file.

    Missing parent directories are created. The path must stay inside the
    download directory.

    Returns:
        A JSON block with the saved path and its size in bytes.
    """
    logger.debug(f'MCP tool download_image called for {output_path}')
    return await run_tool(
        ctx, TOOL_DOWNLOAD_IMAGE, {'url': url, 'output_path': output_path}
    )


@mcp.tool(name=TOOL_GENERATE_TEXT, structured_output=False)
async def mcp_generate_text(
    ctx: Context,
    prompt: StrictStr = Field(description='The prompt to answer'),
    model: StrictStr = Field(default=DEFAULT_TEXT_MODEL, description='Text model to use'),
    seed: Optional[StrictInt] = Field(
        default=None, description='Seed for reproducible generation'
    ),
    system: Optional[StrictStr] = Field(
        default=None, description="System prompt setting the assistant's behaviour"
    ),
    json: StrictBool = Field(default=DEFAULT_JSON_MODE, description='Ask for a JSON answer'),
    private: StrictBool = Field(
        default=DEFAULT_PRIVATE, description='Keep the response out of the public feed'
    ),
) -> CallToolResult:
    """Generate text from a single prompt with Pollinations.ai.

    Returns:
        The generated text; JSON answers are pretty-printed.
    """
    logger.debug(f'MCP tool generate_text called with model: {model}')
    return await run_tool(
        ctx,
        TOOL_GENERATE_TEXT,
        {
            'prompt': prompt,
            'model': model,
            'seed': seed,
            'system': system,
            'json': json,
            'private': private,
        },
    )


@mcp.tool(name=TOOL_GENERATE_TEXT_CHAT, structured_output=False)
async def mcp_generate_text_chat(
    ctx: Context,
    messages: List[ChatMessage] = Field(
        description='Conversation so far, oldest first. Content is text or a list of text/image_url parts'
    ),
    model: StrictStr = Field(default=DEFAULT_TEXT_MODEL, description='Text model to use'),
    seed: Optional[StrictInt] = Field(
        default=None, description='Seed for reproducible generation'
    ),
    json: StrictBool = Field(default=DEFAULT_JSON_MODE, description='Ask for a JSON answer'),
    private: StrictBool = Field(
        default=DEFAULT_PRIVATE, description='Keep the response out of the public feed'
    ),
) -> CallToolResult:
    """Generate the next reply of a conversation with Pollinations.ai.

    Returns:
        The generated reply; JSON answers are pretty-printed.
    """
    logger.debug(f'MCP tool generate_text_chat called with {len(messages)} message(s)')
    return await run_tool(
        ctx,
        TOOL_GENERATE_TEXT_CHAT,
        {
            'messages': [
                message.model_dump(exclude_none=True, mode='json') for message in messages
            ],
            'model': model,
            'seed': seed,
            'json': json,
            'private': private,
        },
    )


@mcp.tool(name=TOOL_LIST_TEXT_MODELS, structured_output=False)
async def mcp_list_text_models(ctx: Context) -> CallToolResult:
    """List the text models available on Pollinations.ai."""
    return await run_tool(ctx, TOOL_LIST_TEXT_MODELS, {})


def main():
    """Run the MCP server."""
    logger.info('Starting pollinations-mcp-server MCP server')
    try:
        mcp.run()
    except KeyboardInterrupt:
        logger.info('Interrupted, pollinations-mcp-server stopped')


if __name__ == '__main__':
    main()
