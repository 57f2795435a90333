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
"""Common utilities for the Pollinations.ai services.

This module provides the error taxonomy shared by every tool, the HTTP client
factory and the single request helper used to talk to the remote service.
"""

import asyncio
import httpx
from awslabs.pollinations_mcp_server.consts import VALIDATION_STATUS_CODE
from awslabs.pollinations_mcp_server.models.common import ServerSettings
from enum import Enum
from loguru import logger
from pydantic import ValidationError
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Classification of tool failures.

    Attributes:
        VALIDATION: Malformed or missing arguments, caught before any I/O.
        REMOTE_API: Non-2xx response or transport failure from the remote service.
        FILE_SYSTEM: Directory creation, write or verification failure.
    """
    VALIDATION = 'validation'
    REMOTE_API = 'remote_api'
    FILE_SYSTEM = 'file_system'


class PollinationsError(Exception):
    """Base exception for classified tool failures.

    Attributes:
        kind: The error classification.
        message: Human-readable error message.
        status_code: HTTP-equivalent status code, if known.
        operation: Name of the step that failed, if relevant.
    """
    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        status_code: Optional[int] = None,
        operation: Optional[str] = None,
    ):
        """Initialize PollinationsError.

        Args:
            kind: The error classification.
            message: Human-readable error message.
            status_code: HTTP-equivalent status code, if known.
            operation: Name of the step that failed, if relevant.
        """
        self.kind = kind
        self.message = message
        self.status_code = status_code
        self.operation = operation
        super().__init__(message)

    def render(self) -> str:
        """Render the error as the single string returned to the caller."""
        text = f'Error: {self.message}'
        if self.status_code is not None:
            text += f' (status code: {self.status_code})'
        return text


class ParameterValidationError(PollinationsError):
    """Raised when tool arguments are malformed or missing."""
    def __init__(self, message: str):
        """Initialize ParameterValidationError with a message."""
        super().__init__(
            kind=ErrorKind.VALIDATION,
            message=message,
            status_code=VALIDATION_STATUS_CODE,
        )


class ContentFilterError(ParameterValidationError):
    """Raised when the service rejects a prompt while safe mode is enabled.

    Attributes:
        prompt: The prompt that was filtered.
    """
    def __init__(self, prompt: str):
        """Initialize ContentFilterError with the filtered prompt."""
        self.prompt = prompt
        super().__init__(
            'Content filtered: the prompt was rejected by the safety filter. '
            'Rephrase the prompt or disable safe mode.'
        )


class RemoteAPIError(PollinationsError):
    """Raised when the remote generation service fails."""
    def __init__(self, message: str, status_code: Optional[int] = None):
        """Initialize RemoteAPIError.

        Args:
            message: Human-readable error message.
            status_code: Status code returned by the service, if any.
        """
        super().__init__(kind=ErrorKind.REMOTE_API, message=message, status_code=status_code)


class FileSystemError(PollinationsError):
    """Raised when a local filesystem step fails.

    The failing step name is part of the rendered message.
    """
    def __init__(self, operation: str, message: str):
        """Initialize FileSystemError.

        Args:
            operation: The step that failed (create_directory, write_file, verify_file).
            message: Human-readable error message.
        """
        super().__init__(
            kind=ErrorKind.FILE_SYSTEM,
            message=f'{operation} failed: {message}',
            operation=operation,
        )


def classify_error(error: BaseException) -> PollinationsError:
    """Convert any exception raised inside a tool handler into a classified error.

    Already classified errors are returned unchanged.

    Args:
        error: The exception to classify.

    Returns:
        A PollinationsError of the matching kind.
    """
    if isinstance(error, PollinationsError):
        return error
    if isinstance(error, httpx.HTTPStatusError):
        return RemoteAPIError(
            f'Request to {error.request.url} failed: {error.response.reason_phrase}',
            status_code=error.response.status_code,
        )
    if isinstance(error, httpx.TimeoutException):
        return RemoteAPIError(f'Request timed out: {str(error) or type(error).__name__}')
    if isinstance(error, (TimeoutError, asyncio.TimeoutError)):
        return RemoteAPIError('Tool call timed out')
    if isinstance(error, httpx.HTTPError):
        return RemoteAPIError(f'Request failed: {str(error) or type(error).__name__}')
    if isinstance(error, OSError):
        return FileSystemError(error.__class__.__name__, str(error))
    if isinstance(error, (ValidationError, ValueError, TypeError)):
        return ParameterValidationError(str(error))
    return RemoteAPIError(f'Unexpected error: {str(error)}')


def create_http_client(settings: ServerSettings) -> httpx.AsyncClient:
    """Create the HTTP client used for every call to the remote service.

    Redirects are followed because the image endpoint answers with a redirect
    to the rendered image.

    Args:
        settings: Server settings holding the timeouts.

    Returns:
        A configured httpx.AsyncClient.
    """
    timeout = httpx.Timeout(settings.read_timeout, connect=settings.connect_timeout)
    return httpx.AsyncClient(timeout=timeout, follow_redirects=True)


async def fetch(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    json_body: Optional[Dict[str, Any]] = None,
) -> httpx.Response:
    """Send one request to the remote service.

    There are no retries; a failed request fails the tool call.

    Args:
        client: The HTTP client.
        method: HTTP method (GET, HEAD or POST).
        url: Fully built request URL.
        json_body: Optional JSON body for POST requests.

    Returns:
        The successful response.

    Raises:
        RemoteAPIError: On transport failures or non-2xx responses.
    """
    logger.debug(f'Sending {method} request', extra={'url': url})
    try:
        response = await client.request(method, url, json=json_body)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.error(
            f'Remote API error: {e.response.status_code}',
            extra={'url': url, 'status_code': e.response.status_code},
        )
        raise classify_error(e) from e
    except httpx.HTTPError as e:
        logger.error(f'Remote request failed: {type(e).__name__}', extra={'url': url})
        raise classify_error(e) from e

    logger.debug(
        f'Remote request succeeded: {response.status_code}',
        extra={'url': url, 'bytes': len(response.content)},
    )
    return response
