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
"""Pollinations.ai image service implementation.

This module turns validated parameters into image URLs and downloads generated
images to the local filesystem. Every download step is classified separately so
the caller can tell which one failed.
"""

import httpx
import json
import os
from awslabs.pollinations_mcp_server.models.common import ServerSettings, text_result
from awslabs.pollinations_mcp_server.models.pollinations_models import (
    DownloadParams,
    ImageGenerationParams,
)
from awslabs.pollinations_mcp_server.services.pollinations_common import (
    ContentFilterError,
    FileSystemError,
    ParameterValidationError,
    RemoteAPIError,
    fetch,
)
from awslabs.pollinations_mcp_server.services.url_builder import build_image_url, prompt_feedback
from awslabs.pollinations_mcp_server.utils.image_utils import describe_image_file
from loguru import logger
from mcp.types import CallToolResult


async def probe_image_url(
    client: httpx.AsyncClient, url: str, params: ImageGenerationParams
) -> None:
    """Check that the service can render the image before handing out its URL.

    Args:
        client: The HTTP client.
        url: The image URL to check.
        params: Parameters the URL was built from.

    Raises:
        ContentFilterError: If safe mode is on and the service rejects the prompt.
        RemoteAPIError: On any other failure.
    """
    try:
        await fetch(client, 'HEAD', url)
    except RemoteAPIError as e:
        if params.safe and e.status_code == 400:
            logger.warning('Prompt rejected by the safety filter', extra={'url': url})
            raise ContentFilterError(params.prompt) from e
        raise


async def generate_image(
    params: ImageGenerationParams,
    client: httpx.AsyncClient,
    settings: ServerSettings,
    probe: bool = False,
) -> CallToolResult:
    """Build the image URL for a prompt.

    Prompt advisories come first in the response, followed by a JSON block with
    the URL and the parameters it was built from.

    Args:
        params: Validated image generation parameters.
        client: The HTTP client, used only when probing.
        settings: Server settings holding the image base URL.
        probe: Check the URL against the service before returning it.

    Returns:
        CallToolResult with the advisories and the JSON description of the image.
    """
    logger.info(
        f'Generating image URL with model: {params.model}',
        extra={
            'width': params.width,
            'height': params.height,
            'seed': params.seed,
            'prompt_length': len(params.prompt),
        },
    )

    url = build_image_url(params, settings.image_base_url)
    feedback = prompt_feedback(params.prompt)
    if feedback:
        logger.debug(f'Prompt advisories: {len(feedback)}')

    if probe:
        await probe_image_url(client, url, params)

    payload = {
        'url': url,
        'prompt': params.prompt,
        'width': params.width,
        'height': params.height,
        'seed': params.seed,
        'model': params.model,
        'nologo': params.nologo,
        'enhance': params.enhance,
        'safe': params.safe,
        'private': params.private,
    }
    return text_result(*feedback, json.dumps(payload, indent=2, ensure_ascii=False))


def resolve_output_path(output_path: str, base_dir: str) -> str:
    """Resolve a download destination inside the base directory.

    Args:
        output_path: Destination requested by the caller.
        base_dir: Directory downloads are confined to.

    Returns:
        The absolute, normalised destination path.

    Raises:
        ParameterValidationError: If the path escapes the base directory or names it.
    """
    base = os.path.realpath(base_dir)
    target = os.path.realpath(os.path.join(base, output_path))
    if target == base or os.path.commonpath([base, target]) != base:
        raise ParameterValidationError(
            f'output_path must name a file inside {base}: {output_path}'
        )
    return target


async def download_image(
    params: DownloadParams,
    client: httpx.AsyncClient,
    base_dir: str,
) -> CallToolResult:
    """Download an image to the local filesystem.

    Workflow:
    1. Resolve the destination inside the base directory
    2. Create the parent directory if needed
    3. Fetch the image bytes
    4. Write them to the destination
    5. Confirm the file exists and read back its size

    Args:
        params: Validated download parameters.
        client: The HTTP client.
        base_dir: Directory relative destinations are resolved against.

    Returns:
        CallToolResult with a JSON block describing the saved file.

    Raises:
        ParameterValidationError: If the destination escapes the base directory.
        FileSystemError: If creating the directory, writing or verifying fails.
        RemoteAPIError: If the image cannot be fetched.
    """
    output_path = resolve_output_path(params.output_path, base_dir)
    logger.info(f'Image will be saved to: {output_path}')

    dirname = os.path.dirname(output_path)
    try:
        if not os.path.isdir(dirname):
            logger.debug(f'Creating directory: {dirname}')
            os.makedirs(dirname, exist_ok=True)
    except OSError as e:
        logger.error(f'Failed to create directory {dirname}: {str(e)}')
        raise FileSystemError('create_directory', f'{dirname}: {str(e)}') from e

    logger.info(f'Downloading image: {params.url}')
    response = await fetch(client, 'GET', params.url)

    try:
        logger.debug(f'Writing file: {output_path}')
        with open(output_path, 'wb') as file:
            file.write(response.content)
    except OSError as e:
        logger.error(f'Failed to write {output_path}: {str(e)}')
        raise FileSystemError('write_file', f'{output_path}: {str(e)}') from e

    if not os.path.exists(output_path):
        logger.error(f'File missing after write: {output_path}')
        raise FileSystemError('verify_file', f'file was not written: {output_path}')
    try:
        file_size = os.path.getsize(output_path)
    except OSError as e:
        raise FileSystemError('verify_file', f'{output_path}: {str(e)}') from e

    logger.info(
        f'Image downloaded: {output_path}',
        extra={'path': output_path, 'size': file_size},
    )

    result = {
        'success': True,
        'message': f'Image downloaded to {output_path}',
        'size': file_size,
        'path': output_path,
    }
    result.update(describe_image_file(output_path))
    return text_result(json.dumps(result, indent=2, ensure_ascii=False))
