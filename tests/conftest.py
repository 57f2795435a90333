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
"""Shared fixtures for the pollinations-mcp-server tests."""

import httpx
import pytest
from io import BytesIO
from PIL import Image
from typing import Callable, List
from unittest.mock import AsyncMock, MagicMock


def create_png_bytes(width: int = 64, height: int = 32) -> bytes:
    """Create a small PNG image and return its bytes."""
    img = Image.new('RGB', (width, height), color='blue')
    buffer = BytesIO()
    img.save(buffer, format='PNG')
    return buffer.getvalue()


@pytest.fixture
def mock_context():
    """Create a mock MCP context."""
    context = MagicMock()
    context.error = AsyncMock()
    return context


@pytest.fixture
def temp_workspace_dir(tmp_path):
    """Create a temporary workspace directory."""
    return str(tmp_path)


@pytest.fixture
def recorded_requests() -> List[httpx.Request]:
    """Requests sent through clients built by mock_http_client."""
    return []


@pytest.fixture
def mock_http_client(recorded_requests) -> Callable[..., httpx.AsyncClient]:
    """Build an httpx client whose requests are answered by a handler function."""
    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        def record(request: httpx.Request) -> httpx.Response:
            recorded_requests.append(request)
            return handler(request)

        return httpx.AsyncClient(transport=httpx.MockTransport(record), follow_redirects=True)

    return factory


@pytest.fixture
def png_bytes() -> bytes:
    """A 64x32 PNG image."""
    return create_png_bytes()
