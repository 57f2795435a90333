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
"""Pydantic models for Pollinations.ai tool parameters.

This module defines the per-tool parameter records and the structural validation
that gates every tool call. Validation only checks presence and types; it does
not check that values make sense to the remote service.
"""

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
)
from collections.abc import Mapping
from enum import Enum
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
)
from typing import Any, ClassVar, List, Literal, Optional, Type, Union
from urllib.parse import urlsplit


class ToolParams(BaseModel):
    """Base class for tool parameter records.

    Unknown keys are ignored so callers may send extra fields.
    """
    model_config = ConfigDict(extra='ignore')

    description: ClassVar[str] = 'tool'


class ImageGenerationParams(ToolParams):
    """Parameters for generating a Pollinations image URL.

    Attributes:
        prompt: Text description of the image to generate.
        width: Image width in pixels.
        height: Image height in pixels.
        seed: Optional seed for reproducible generation.
        model: Image model name (e.g. flux).
        nologo: Remove the Pollinations watermark.
        enhance: Let the service enhance the prompt.
        safe: Enable the service's content safety filter.
        private: Keep the image out of the public feed.
    """
    description: ClassVar[str] = 'image generation'

    prompt: StrictStr = Field(..., min_length=1)
    width: StrictInt = DEFAULT_WIDTH
    height: StrictInt = DEFAULT_HEIGHT
    seed: Optional[StrictInt] = None
    model: StrictStr = DEFAULT_IMAGE_MODEL
    nologo: StrictBool = DEFAULT_NOLOGO
    enhance: StrictBool = DEFAULT_ENHANCE
    safe: StrictBool = DEFAULT_SAFE
    private: StrictBool = DEFAULT_PRIVATE


class TextGenerationParams(ToolParams):
    """Parameters for single-prompt (GET) text generation.

    Attributes:
        prompt: The prompt to answer.
        model: Text model name (e.g. openai).
        seed: Optional seed for reproducible generation.
        system: Optional system prompt.
        json: Ask the service for a JSON answer.
        private: Keep the response out of the public feed.
    """
    description: ClassVar[str] = 'text generation'

    prompt: StrictStr = Field(..., min_length=1)
    model: StrictStr = DEFAULT_TEXT_MODEL
    seed: Optional[StrictInt] = None
    system: Optional[StrictStr] = None
    json_mode: StrictBool = Field(default=DEFAULT_JSON_MODE, alias='json')
    private: StrictBool = DEFAULT_PRIVATE

    model_config = ConfigDict(extra='ignore', populate_by_name=True)


class ContentPartType(str, Enum):
    """Kinds of segments allowed in a chat message.

    Attributes:
        TEXT: Plain text segment.
        IMAGE_URL: Reference to an image by URL.
    """
    TEXT = 'text'
    IMAGE_URL = 'image_url'


class ImageReference(BaseModel):
    """URL of an image referenced from a chat message."""
    url: StrictStr


class ContentPart(BaseModel):
    """One segment of a mixed chat message."""
    type: ContentPartType
    text: Optional[StrictStr] = None
    image_url: Optional[ImageReference] = None

    @field_validator('image_url')
    @classmethod
    def validate_reference(cls, v: Optional[ImageReference]) -> Optional[ImageReference]:
        """Reject empty image references."""
        if v is not None and not v.url:
            raise ValueError('image_url.url must not be empty')
        return v


class ChatMessage(BaseModel):
    """A single chat message; content is plain text or a list of segments."""
    role: StrictStr = Field(..., min_length=1)
    content: Union[StrictStr, List[ContentPart]]


class TextChatParams(ToolParams):
    """Parameters for conversation (POST) text generation.

    Attributes:
        messages: The conversation to continue, oldest first.
        model: Text model name.
        seed: Optional seed for reproducible generation.
        json: Ask the service for a JSON answer.
        private: Keep the response out of the public feed.
    """
    description: ClassVar[str] = 'text chat'

    messages: List[ChatMessage] = Field(..., min_length=1)
    model: StrictStr = DEFAULT_TEXT_MODEL
    seed: Optional[StrictInt] = None
    json_mode: StrictBool = Field(default=DEFAULT_JSON_MODE, alias='json')
    private: StrictBool = DEFAULT_PRIVATE

    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    def to_request_body(self) -> dict:
        """Build the JSON body expected by the text service."""
        body = {
            'messages': [message.model_dump(exclude_none=True, mode='json') for message in self.messages],
            'model': self.model,
            'jsonMode': self.json_mode,
            'private': self.private,
        }
        if self.seed is not None:
            body['seed'] = self.seed
        return body


class DownloadParams(ToolParams):
    """Parameters for downloading a generated image.

    Attributes:
        url: Absolute http(s) URL of the image.
        output_path: Destination path, relative to the download directory.
    """
    description: ClassVar[str] = 'image download'

    url: StrictStr
    output_path: StrictStr = Field(default=DEFAULT_OUTPUT_PATH, min_length=1)

    @field_validator('url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate that the URL is an absolute http(s) URL.

        Args:
            v: The URL string to validate.

        Returns:
            The URL unchanged.

        Raises:
            ValueError: If the scheme is not http/https or the host is missing.
        """
        parts = urlsplit(v)
        if parts.scheme not in ('http', 'https') or not parts.netloc:
            raise ValueError(f'Not a valid http(s) URL: {v}')
        return v


class ValidArguments(BaseModel):
    """Arguments that passed validation."""
    ok: Literal[True] = True
    params: Any


class InvalidArguments(BaseModel):
    """Arguments that failed validation.

    Attributes:
        message: Summary naming the tool whose arguments were rejected.
        errors: One line per offending field.
    """
    ok: Literal[False] = False
    message: str
    errors: List[str] = Field(default_factory=list)

    def describe(self) -> str:
        """Render the failure as a single line."""
        if not self.errors:
            return self.message
        return f"{self.message}: {'; '.join(self.errors)}"


ValidationResult = Union[ValidArguments, InvalidArguments]


def validate_tool_arguments(params_cls: Type[ToolParams], arguments: Any) -> ValidationResult:
    """Check raw tool arguments against a parameter record.

    Args:
        params_cls: The parameter record the arguments must conform to.
        arguments: The untyped arguments received with the tool call.

    Returns:
        ValidArguments holding the parsed record, or InvalidArguments describing
        every offending field.
    """
    message = f'Invalid {params_cls.description} parameters'
    if not isinstance(arguments, Mapping):
        return InvalidArguments(
            message=message,
            errors=[f'expected an object, got {type(arguments).__name__}'],
        )
    try:
        return ValidArguments(params=params_cls.model_validate(dict(arguments)))
    except ValidationError as e:
        errors = []
        for error in e.errors():
            location = '.'.join(str(part) for part in error['loc']) or 'arguments'
            errors.append(f"{location}: {error['msg']}")
        return InvalidArguments(message=message, errors=errors)
