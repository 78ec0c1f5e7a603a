"""
Pinterest Analyzer Cloud Function

Tags the garments in the main image of a Pinterest pin.

Responsibilities:
- Validate the pin URL against the Pinterest domain allow-list
- Fetch the pin page and extract its main image URL
- Download the image (through the proxy if Pinterest refuses)
- Ask Gemini for per-garment tag lists

Does NOT:
- Run JavaScript or render the page
- Handle boards, profiles or search pages with many images
"""

import functions_framework
import logging
import os
import sys

# Add shared module to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from lookanalyst import config
from lookanalyst.errors import AnalysisError, ExtractionError, LookAnalystError
from lookanalyst.gemini import analyze_image, resolve_language
from lookanalyst.hosts import is_pinterest_url
from lookanalyst.http_utils import error_response, json_response, preflight_response
from lookanalyst.pipeline import resolve_pin_image
from lookanalyst.staging import TransientStorage

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@functions_framework.http
def analyze_pinterest(request):
    """
    Main Cloud Function entry point.

    Expected JSON input:
    {
        "url": "https://www.pinterest.com/pin/5348093303823893/"
    }

    Optional query parameter ?lang=es|en|pt|fr|it|de selects the tag language.
    """
    if request.method == 'OPTIONS':
        return preflight_response('POST')

    if request.method != 'POST':
        return error_response('Method not allowed', 405)

    request_json = request.get_json(silent=True) or {}
    url = (request_json.get('url') or '').strip()

    if not url:
        return error_response('Pinterest URL is required', 400)

    if not is_pinterest_url(url):
        return error_response('Invalid URL. Must be a valid Pinterest URL.', 400)

    lang = resolve_language(request.args.get('lang'))
    storage = TransientStorage(config.UPLOAD_DIR)

    try:
        staged = resolve_pin_image(url, storage)
    except ExtractionError as e:
        return error_response('Could not extract the image from Pinterest', 404, details=str(e))
    except LookAnalystError as e:
        logger.warning("Pinterest image unavailable for %s: %s", url, e)
        return error_response('Could not download the Pinterest image', 502, details=str(e))
    except Exception as e:
        logger.exception("Unexpected error resolving pin %s", url)
        return error_response('Internal server error', 500, details=str(e))

    logger.info("Staged image %s", staged.describe())

    with staged:
        try:
            result = analyze_image(staged, lang)
        except AnalysisError as e:
            return error_response('Internal server error while analyzing the image', 500, details=str(e))
        except Exception as e:
            logger.exception("Unexpected error analyzing pin %s", url)
            return error_response('Internal server error', 500, details=str(e))

    response = {'success': True}
    response.update(result)
    response.update({
        'sourceUrl': url,
        'imageUrl': staged.source_url,
        'strategy': staged.strategy,
    })
    return json_response(response)
