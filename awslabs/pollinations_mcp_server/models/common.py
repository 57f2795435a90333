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
"""Common models shared across the Pollinations tools."""

import os
from awslabs.pollinations_mcp_server.consts import (
    DEFAULT_IMAGE_BASE_URL,
    DEFAULT_TEXT_BASE_URL,
    HTTP_CONNECT_TIMEOUT,
    HTTP_READ_TIMEOUT,
    TOOL_CALL_TIMEOUT,
)
from mcp.types import CallToolResult, TextContent
from pydantic import BaseModel, Field, field_validator
from typing import Optional


class ServerSettings(BaseModel):
    """Runtime configuration for the Pollinations MCP server.

    Attributes:
        image_base_url: Base URL of the image generation service.
        text_base_url: Base URL of the text generation service.
        download_dir: Base directory for downloads. If None, the working directory
            at invocation time is used.
        connect_timeout: Seconds to wait for a connection to the remote service.
        read_timeout: Seconds to wait for the remote service to respond.
        call_timeout: Upper bound in seconds for a whole tool invocation.
        probe_images: Whether generate_image checks the URL before returning it.
    """
    image_base_url: str = DEFAULT_IMAGE_BASE_URL
    text_base_url: str = DEFAULT_TEXT_BASE_URL
    download_dir: Optional[str] = None
    connect_timeout: float = Field(default=HTTP_CONNECT_TIMEOUT, gt=0)
    read_timeout: float = Field(default=HTTP_READ_TIMEOUT, gt=0)
    call_timeout: float = Field(default=TOOL_CALL_TIMEOUT, gt=0)
    probe_images: bool = False

    @field_validator('image_base_url', 'text_base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalise base URLs so paths can be appended with a single slash."""
        return v.rstrip('/')

    @classmethod
    def from_env(cls) -> 'ServerSettings':
        """Build settings from POLLINATIONS_* environment variables."""
        values = {}
        env_map = {
            'image_base_url': 'POLLINATIONS_IMAGE_BASE_URL',
            'text_base_url': 'POLLINATIONS_TEXT_BASE_URL',
            'download_dir': 'POLLINATIONS_DOWNLOAD_DIR',
            'connect_timeout': 'POLLINATIONS_CONNECT_TIMEOUT',
            'read_timeout': 'POLLINATIONS_READ_TIMEOUT',
            'call_timeout': 'POLLINATIONS_CALL_TIMEOUT',
            'probe_images': 'POLLINATIONS_PROBE_IMAGES',
        }
        for field_name, env_name in env_map.items():
            value = os.environ.get(env_name)
            if value:
                values[field_name] = value
        return cls(**values)

    def resolve_download_dir(self) -> str:
        """Return the absolute base directory for downloads."""
        return os.path.abspath(self.download_dir or os.getcwd())


def text_result(*texts: str) -> CallToolResult:
    """Build a successful response envelope with one text block per string."""
    return CallToolResult(
        content=[TextContent(type='text', text=text) for text in texts],
        isError=False,
    )


def error_result(message: str) -> CallToolResult:
    """Build a failed response envelope carrying a single rendered message."""
    return CallToolResult(
        content=[TextContent(type='text', text=message)],
        isError=True,
    )


def result_text(result: CallToolResult) -> str:
    """Join the text blocks of a response envelope."""
    return '\n'.join(block.text for block in result.content if isinstance(block, TextContent))
