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
# Constants
DEFAULT_IMAGE_BASE_URL = 'https://pollinations.ai'
DEFAULT_TEXT_BASE_URL = 'https://text.pollinations.ai'

# Tool names
TOOL_GENERATE_IMAGE = 'generate_image'
TOOL_DOWNLOAD_IMAGE = 'download_image'
TOOL_GENERATE_TEXT = 'generate_text'
TOOL_GENERATE_TEXT_CHAT = 'generate_text_chat'
TOOL_LIST_TEXT_MODELS = 'list_text_models'

# Image generation defaults
DEFAULT_WIDTH = 1024
DEFAULT_HEIGHT = 1024
DEFAULT_IMAGE_MODEL = 'flux'
DEFAULT_NOLOGO = True
DEFAULT_ENHANCE = False
DEFAULT_SAFE = False
DEFAULT_PRIVATE = False

# Text generation defaults
DEFAULT_TEXT_MODEL = 'openai'
DEFAULT_JSON_MODE = False

# Download defaults
DEFAULT_OUTPUT_PATH = 'image.jpg'

# Prompt advisories
MAX_CONCISE_PROMPT_LENGTH = 200
MAX_NON_ENGLISH_RATIO = 0.2
ENGLISH_CHARACTERS = r"""A-Za-z0-9\s.,;:'"!?()\-"""

# Characters left unescaped by percent-encoding (same set as JavaScript encodeURIComponent)
URI_COMPONENT_SAFE = "-_.!~*'()"

# HTTP configuration
# No retries: every failure is terminal for the invocation.
HTTP_CONNECT_TIMEOUT = 10.0  # Seconds to wait for connection
HTTP_READ_TIMEOUT = 120.0  # Seconds to wait for response (image rendering can take a while)
TOOL_CALL_TIMEOUT = 180.0  # Upper bound for a whole tool invocation

# Status code reported for validation failures
VALIDATION_STATUS_CODE = 400


PROMPT_INSTRUCTIONS = """
# Pollinations.ai Prompting Best Practices

## General Guidelines

- Pollinations.ai understands English prompts best. Prompts that are mostly in another language still work, but results are usually less faithful.
- Keep prompts short and precise. Prompts longer than 200 characters tend to dilute the important details.
- Put the most important details first.

## Effective Prompt Structure

An effective prompt often includes short descriptions of:

1. The subject
2. The environment
3. (optional) Lighting description
4. (optional) Camera position/framing
5. (optional) The visual style or medium ("photo", "illustration", "painting", etc.)

## Refining Results

1. Use a fixed `seed` and make small changes to the prompt.
2. Once the prompt is refined, vary the `seed` to get more variations.
3. Set `enhance` to let the service expand the prompt with more detail.

## Examples

- "watercolor painting of a lighthouse on a cliff at sunset"
- "isometric illustration of a tiny coffee shop, soft pastel colors"
- "macro photo of a dew drop on a green leaf, shallow depth of field"
"""

TEXT_INSTRUCTIONS = """
# Pollinations.ai Text Generation

- Use `generate_text` for a single prompt. `system` sets the assistant's behaviour and `json` asks for a JSON answer.
- Use `generate_text_chat` to send a whole conversation. Message content can be plain text or a list of
  `{"type": "text", "text": ...}` and `{"type": "image_url", "image_url": {"url": ...}}` parts.
- Use `list_text_models` to see which models are available before choosing `model`.
"""
