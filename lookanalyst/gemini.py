"""
Garment recognition with Gemini.

Sends a staged image plus a constrained-format prompt and turns the
numbered tag lists in the reply into structured data.
"""

import logging
from typing import Any, Dict, Optional

import google.generativeai as genai

from . import config
from .errors import AnalysisError
from .staging import StagedImage
from .tag_parser import parse_clothing_tags

logger = logging.getLogger(__name__)

NO_GARMENTS_MESSAGE = 'No clothing items found in the image'

PROMPT_TEMPLATE = """Analyze this image and identify every item of clothing you can see.
For each garment, generate individual comma-separated tags covering:
- Garment type (trousers, t-shirt, jacket, blazer, etc.)
- Main colour (black, white, blue, etc.)
- Style (baggy, oversize, vintage, classic, etc.)
- Material when evident (denim, leather, cotton, etc.)
- Special details (print, stripes, embroidery, etc.)
- Length/cut (short, long, mid-length, etc.)

Respond ONLY with a numbered list of tag arrays, one per line, in this format:
1: [tag1, tag2, tag3, tag4, tag5]
2: [tag1, tag2, tag3, tag4, tag5]

Example response:
1: [blazer, grey, check print, mid-length, tweed]
2: [trousers, black, skinny, denim, fitted]

If you find no clothing, respond: "{no_garments}."
IMPORTANT: write EVERYTHING in the language "{lang}".
"""


def resolve_language(value: Optional[str]) -> str:
    """Map a ?lang= value to a supported language code, defaulting to Spanish."""
    lang = (value or '').strip().lower()
    return lang if lang in config.SUPPORTED_LANGUAGES else config.DEFAULT_LANGUAGE


def build_prompt(lang: str) -> str:
    return PROMPT_TEMPLATE.format(no_garments=NO_GARMENTS_MESSAGE, lang=lang)


def analyze_image(
    image: StagedImage,
    lang: str = config.DEFAULT_LANGUAGE,
    api_key: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Tag every garment in a staged image.

    Args:
        image: Staged image to send (read, not released)
        lang: Response language code
        api_key: Overrides GEMINI_API_KEY

    Returns:
        Dict with clothingTags, count, modelUsed, rawResponse, plus message
        when no garment was recognised

    Raises:
        AnalysisError: Missing API key or any Gemini failure
    """
    api_key = api_key or config.GEMINI_API_KEY
    if not api_key:
        raise AnalysisError('GEMINI_API_KEY not configured')

    model_name = config.GEMINI_MODEL
    try:
        genai.configure(api_key=api_key)
        model = genai.GenerativeModel(model_name)
        response = model.generate_content([
            build_prompt(lang),
            {'mime_type': image.mime_type, 'data': image.read_bytes()},
        ])
        text = response.text
    except Exception as e:
        logger.error("Gemini analysis failed for %s: %s", image.path, e)
        raise AnalysisError(f'Error analyzing image: {e}') from e

    clothing_tags = parse_clothing_tags(text)
    result = {
        'clothingTags': clothing_tags,
        'count': len(clothing_tags),
        'modelUsed': model_name,
        'rawResponse': text,
    }
    if not clothing_tags:
        result['message'] = NO_GARMENTS_MESSAGE

    logger.info("Gemini found %d garments", len(clothing_tags))
    return result
