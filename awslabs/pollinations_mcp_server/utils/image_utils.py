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
"""Image inspection utilities for downloaded files."""

from loguru import logger
from PIL import Image, UnidentifiedImageError
from typing import Any, Dict


def describe_image_file(file_path: str) -> Dict[str, Any]:
    """Read the format and dimensions of an image file.

    The service may answer with something that is not an image (an error page,
    for instance) or with an image too large to decode safely. Such files are
    reported with no details rather than failing.

    Args:
        file_path: Path to the downloaded file.

    Returns:
        Dictionary with 'format', 'width' and 'height', or an empty dictionary
        if the file is not a recognisable image.
    """
    try:
        with Image.open(file_path) as image:
            width, height = image.size
            return {'format': image.format, 'width': width, 'height': height}
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        logger.warning(f'Downloaded file is not a recognisable image: {str(e)}')
        return {}
