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
"""Tool dispatch for the Pollinations MCP server.

The dispatcher owns the HTTP client, routes a tool name to its handler, gates
every call on argument validation and turns all failures into a response
envelope. Only an unknown tool name escapes as a protocol-level error.
"""

import asyncio
import httpx
from awslabs.pollinations_mcp_server.consts import (
    TOOL_DOWNLOAD_IMAGE,
    TOOL_GENERATE_IMAGE,
    TOOL_GENERATE_TEXT,
    TOOL_GENERATE_TEXT_CHAT,
    TOOL_LIST_TEXT_MODELS,
)
from awslabs.pollinations_mcp_server.models.common import ServerSettings, error_result
from awslabs.pollinations_mcp_server.models.pollinations_models import (
    DownloadParams,
    ImageGenerationParams,
    InvalidArguments,
    TextChatParams,
    TextGenerationParams,
    ToolParams,
    validate_tool_arguments,
)
from awslabs.pollinations_mcp_server.services import image_service, text_service
from awslabs.pollinations_mcp_server.services.pollinations_common import (
    ParameterValidationError,
    classify_error,
    create_http_client,
)
from contextlib import asynccontextmanager
from loguru import logger
from mcp.shared.exceptions import McpError
from mcp.types import METHOD_NOT_FOUND, CallToolResult, ErrorData
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Tuple, Type


Handler = Callable[[Any], Awaitable[CallToolResult]]


class ToolDispatcher:
    """Route tool calls to their handlers and normalise the outcome.

    Attributes:
        settings: Server settings used by every handler.
    """
    def __init__(
        self,
        settings: Optional[ServerSettings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the dispatcher.

        Args:
            settings: Server settings. Defaults are used if None.
            http_client: HTTP client to use. If None, one is created on first use
                and closed by shutdown().
        """
        self.settings = settings or ServerSettings()
        self._client = http_client
        self._owns_client = http_client is None
        self._sessions = 0
        self._handlers: Dict[str, Tuple[Optional[Type[ToolParams]], Handler]] = {
            TOOL_GENERATE_IMAGE: (ImageGenerationParams, self._generate_image),
            TOOL_DOWNLOAD_IMAGE: (DownloadParams, self._download_image),
            TOOL_GENERATE_TEXT: (TextGenerationParams, self._generate_text),
            TOOL_GENERATE_TEXT_CHAT: (TextChatParams, self._generate_text_chat),
            TOOL_LIST_TEXT_MODELS: (None, self._list_text_models),
        }

    @property
    def client(self) -> httpx.AsyncClient:
        """The HTTP client, created on first use."""
        if self._client is None:
            self._client = create_http_client(self.settings)
        return self._client

    def tool_names(self) -> List[str]:
        """Names of the tools this dispatcher serves."""
        return list(self._handlers)

    def require_tool(self, name: str) -> Tuple[Optional[Type[ToolParams]], Handler]:
        """Look up a tool by name.

        Raises:
            McpError: With METHOD_NOT_FOUND if the tool name is unknown.
        """
        entry = self._handlers.get(name)
        if entry is None:
            logger.error(f'Unknown tool: {name}')
            raise McpError(ErrorData(code=METHOD_NOT_FOUND, message=f'Unknown tool: {name}'))
        return entry

    async def call_tool(self, name: str, arguments: Any) -> CallToolResult:
        """Invoke a tool by name.

        Args:
            name: The tool name.
            arguments: Untyped arguments received with the call.

        Returns:
            CallToolResult; isError is set when the call failed.

        Raises:
            McpError: With METHOD_NOT_FOUND if the tool name is unknown.
        """
        params_cls, handler = self.require_tool(name)

        logger.debug(f'Tool {name} called')
        try:
            params = None
            if params_cls is not None:
                outcome = validate_tool_arguments(params_cls, arguments)
                if isinstance(outcome, InvalidArguments):
                    raise ParameterValidationError(outcome.describe())
                params = outcome.params
            return await asyncio.wait_for(handler(params), timeout=self.settings.call_timeout)
        except Exception as e:
            error = classify_error(e)
            logger.error(
                f'Error in tool {name}: {error.message}',
                extra={'kind': error.kind.value, 'status_code': error.status_code},
            )
            return error_result(error.render())

    @asynccontextmanager
    async def session(self) -> AsyncIterator['ToolDispatcher']:
        """Hold the dispatcher open for one server session.

        The HTTP client is shut down when the last open session ends.
        """
        self._sessions += 1
        try:
            yield self
        finally:
            self._sessions -= 1
            if self._sessions == 0:
                await self.shutdown()

    async def shutdown(self) -> None:
        """Release the HTTP client. Safe to call more than once.

        A client created by the dispatcher is closed and re-created on next use.
        A client passed in by the caller is left open.
        """
        if not self._owns_client or self._client is None:
            return
        client, self._client = self._client, None
        await client.aclose()
        logger.info('HTTP client closed')

    async def _generate_image(self, params: ImageGenerationParams) -> CallToolResult:
        return await image_service.generate_image(
            params,
            self.client,
            self.settings,
            probe=self.settings.probe_images,
        )

    async def _download_image(self, params: DownloadParams) -> CallToolResult:
        return await image_service.download_image(
            params,
            self.client,
            self.settings.resolve_download_dir(),
        )

    async def _generate_text(self, params: TextGenerationParams) -> CallToolResult:
        return await text_service.generate_text(params, self.client, self.settings)

    async def _generate_text_chat(self, params: TextChatParams) -> CallToolResult:
        return await text_service.generate_text_chat(params, self.client, self.settings)

    async def _list_text_models(self, params: None) -> CallToolResult:
        return await text_service.list_text_models(self.client, self.settings)
