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
"""Tests for the models of the pollinations-mcp-server."""

import os
import pytest
from awslabs.pollinations_mcp_server.models.common import (
    ServerSettings,
    error_result,
    result_text,
    text_result,
)
from awslabs.pollinations_mcp_server.models.pollinations_models import (
    ContentPartType,
    DownloadParams,
    ImageGenerationParams,
    InvalidArguments,
    TextChatParams,
    TextGenerationParams,
    ValidArguments,
    validate_tool_arguments,
)
from pydantic import ValidationError


class TestImageGenerationParams:
    """Tests for the ImageGenerationParams model."""

    def test_defaults(self):
        """Test that defaults match the tool catalog."""
        params = ImageGenerationParams(prompt='a cat')
        assert params.width == 1024
        assert params.height == 1024
        assert params.seed is None
        assert params.model == 'flux'
        assert params.nologo is True
        assert params.enhance is False
        assert params.safe is False
        assert params.private is False

    def test_empty_prompt_rejected(self):
        """Test that empty prompts are rejected."""
        with pytest.raises(ValidationError):
            ImageGenerationParams(prompt='')


class TestValidateToolArguments:
    """Tests for the validate_tool_arguments function."""

    def test_valid_arguments(self):
        """Test that conforming arguments are accepted."""
        outcome = validate_tool_arguments(
            ImageGenerationParams, {'prompt': 'a cat', 'width': 512, 'seed': 3, 'safe': True}
        )
        assert isinstance(outcome, ValidArguments)
        assert outcome.ok is True
        assert outcome.params.width == 512
        assert outcome.params.seed == 3
        assert outcome.params.safe is True

    def test_prompt_wrong_type(self):
        """Test that a numeric prompt is rejected."""
        outcome = validate_tool_arguments(ImageGenerationParams, {'prompt': 123})
        assert isinstance(outcome, InvalidArguments)
        assert outcome.ok is False
        assert outcome.message == 'Invalid image generation parameters'
        assert any(error.startswith('prompt:') for error in outcome.errors)

    def test_missing_prompt(self):
        """Test that a missing prompt is rejected."""
        outcome = validate_tool_arguments(ImageGenerationParams, {'width': 512})
        assert isinstance(outcome, InvalidArguments)
        assert 'prompt' in outcome.describe()

    @pytest.mark.parametrize(
        'arguments',
        [
            {'prompt': 'a cat', 'width': '512'},
            {'prompt': 'a cat', 'height': True},
            {'prompt': 'a cat', 'seed': 'abc'},
            {'prompt': 'a cat', 'model': 5},
            {'prompt': 'a cat', 'nologo': 1},
            {'prompt': 'a cat', 'enhance': 'yes'},
        ],
    )
    def test_wrong_field_types(self, arguments):
        """Test that fields with the wrong type are rejected without coercion."""
        outcome = validate_tool_arguments(ImageGenerationParams, arguments)
        assert isinstance(outcome, InvalidArguments)

    @pytest.mark.parametrize('arguments', [None, [], 'prompt', 42])
    def test_non_mapping_arguments(self, arguments):
        """Test that arguments which are not an object are rejected."""
        outcome = validate_tool_arguments(ImageGenerationParams, arguments)
        assert isinstance(outcome, InvalidArguments)
        assert 'expected an object' in outcome.describe()

    def test_extra_keys_ignored(self):
        """Test that unknown keys do not fail validation."""
        outcome = validate_tool_arguments(
            ImageGenerationParams, {'prompt': 'a cat', 'unknown': 'value'}
        )
        assert isinstance(outcome, ValidArguments)

    def test_text_json_alias(self):
        """Test that the json option is read from its wire name."""
        outcome = validate_tool_arguments(
            TextGenerationParams, {'prompt': 'hi', 'json': True, 'system': 'brief'}
        )
        assert isinstance(outcome, ValidArguments)
        assert outcome.params.json_mode is True
        assert outcome.params.system == 'brief'
        assert outcome.params.model == 'openai'

    def test_text_system_wrong_type(self):
        """Test that a non-string system prompt is rejected."""
        outcome = validate_tool_arguments(TextGenerationParams, {'prompt': 'hi', 'system': 1})
        assert isinstance(outcome, InvalidArguments)
        assert outcome.message == 'Invalid text generation parameters'


class TestDownloadParams:
    """Tests for the DownloadParams model."""

    def test_default_output_path(self):
        """Test the default destination."""
        params = DownloadParams(url='https://pollinations.ai/prompt/cat')
        assert params.output_path == 'image.jpg'

    @pytest.mark.parametrize('url', ['not a url', 'ftp://example.com/a.jpg', 'https://', '/local'])
    def test_invalid_urls(self, url):
        """Test that non http(s) URLs are rejected."""
        outcome = validate_tool_arguments(DownloadParams, {'url': url})
        assert isinstance(outcome, InvalidArguments)
        assert outcome.message == 'Invalid image download parameters'

    def test_url_unchanged(self):
        """Test that a valid URL is kept verbatim."""
        url = 'https://pollinations.ai/prompt/a%20cat?width=1024&height=1024'
        assert DownloadParams(url=url).url == url


class TestTextChatParams:
    """Tests for the TextChatParams model."""

    def test_request_body(self):
        """Test the POST body built from a mixed conversation."""
        params = TextChatParams.model_validate(
            {
                'messages': [
                    {'role': 'system', 'content': 'You are terse.'},
                    {
                        'role': 'user',
                        'content': [
                            {'type': 'text', 'text': 'What is in this picture?'},
                            {'type': 'image_url', 'image_url': {'url': 'https://example.com/a.png'}},
                        ],
                    },
                ],
                'seed': 9,
                'json': True,
            }
        )
        assert params.messages[1].content[1].type == ContentPartType.IMAGE_URL
        assert params.to_request_body() == {
            'messages': [
                {'role': 'system', 'content': 'You are terse.'},
                {
                    'role': 'user',
                    'content': [
                        {'type': 'text', 'text': 'What is in this picture?'},
                        {'type': 'image_url', 'image_url': {'url': 'https://example.com/a.png'}},
                    ],
                },
            ],
            'model': 'openai',
            'seed': 9,
            'jsonMode': True,
            'private': False,
        }

    def test_request_body_without_seed(self):
        """Test that an unset seed is left out of the request body."""
        params = TextChatParams.model_validate({'messages': [{'role': 'user', 'content': 'Hi'}]})
        assert params.to_request_body() == {
            'messages': [{'role': 'user', 'content': 'Hi'}],
            'model': 'openai',
            'jsonMode': False,
            'private': False,
        }

    def test_empty_messages_rejected(self):
        """Test that a conversation needs at least one message."""
        outcome = validate_tool_arguments(TextChatParams, {'messages': []})
        assert isinstance(outcome, InvalidArguments)

    def test_unknown_part_type_rejected(self):
        """Test that only text and image_url parts are accepted."""
        outcome = validate_tool_arguments(
            TextChatParams,
            {'messages': [{'role': 'user', 'content': [{'type': 'audio', 'text': 'x'}]}]},
        )
        assert isinstance(outcome, InvalidArguments)


class TestServerSettings:
    """Tests for the ServerSettings model."""

    def test_defaults(self, monkeypatch):
        """Test defaults when no environment variables are set."""
        for name in (
            'POLLINATIONS_IMAGE_BASE_URL',
            'POLLINATIONS_TEXT_BASE_URL',
            'POLLINATIONS_DOWNLOAD_DIR',
            'POLLINATIONS_CONNECT_TIMEOUT',
            'POLLINATIONS_READ_TIMEOUT',
            'POLLINATIONS_CALL_TIMEOUT',
            'POLLINATIONS_PROBE_IMAGES',
        ):
            monkeypatch.delenv(name, raising=False)
        settings = ServerSettings.from_env()
        assert settings.image_base_url == 'https://pollinations.ai'
        assert settings.text_base_url == 'https://text.pollinations.ai'
        assert settings.download_dir is None
        assert settings.probe_images is False

    def test_from_env(self, monkeypatch, temp_workspace_dir):
        """Test that environment variables override defaults."""
        monkeypatch.setenv('POLLINATIONS_IMAGE_BASE_URL', 'http://localhost:8080/')
        monkeypatch.setenv('POLLINATIONS_DOWNLOAD_DIR', temp_workspace_dir)
        monkeypatch.setenv('POLLINATIONS_READ_TIMEOUT', '5')
        monkeypatch.setenv('POLLINATIONS_PROBE_IMAGES', 'true')
        settings = ServerSettings.from_env()
        assert settings.image_base_url == 'http://localhost:8080'
        assert settings.read_timeout == 5.0
        assert settings.probe_images is True
        assert settings.resolve_download_dir() == temp_workspace_dir

    def test_download_dir_defaults_to_cwd(self, monkeypatch, temp_workspace_dir):
        """Test that the working directory is used at call time."""
        monkeypatch.chdir(temp_workspace_dir)
        assert os.path.realpath(ServerSettings().resolve_download_dir()) == os.path.realpath(
            temp_workspace_dir
        )


class TestResultHelpers:
    """Tests for the response envelope helpers."""

    def test_text_result(self):
        """Test a successful envelope."""
        result = text_result('first', 'second')
        assert result.isError is False
        assert [block.text for block in result.content] == ['first', 'second']
        assert result_text(result) == 'first\nsecond'

    def test_error_result(self):
        """Test a failed envelope."""
        result = error_result('Error: boom')
        assert result.isError is True
        assert result_text(result) == 'Error: boom'
