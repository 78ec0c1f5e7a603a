"""
Clothing Analyzer Cloud Function

Tags the garments in an uploaded image or an image URL.

Responsibilities:
- Accept a multipart upload (field "image") or a JSON/form "imageUrl"
- Stage the image in transient storage
- Ask Gemini for per-garment tag lists
- Return the parsed tags as JSON

Does NOT:
- Scrape Pinterest pages (pinterest-analyzer's job)
- Keep any image after the request
"""

import functions_framework
import logging
import os
import sys

# Add shared module to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from lookanalyst import config
from lookanalyst.errors import AnalysisError, LookAnalystError, UploadTooLargeError
from lookanalyst.gemini import analyze_image, resolve_language
from lookanalyst.http_utils import error_response, json_response, preflight_response
from lookanalyst.pipeline import download_image
from lookanalyst.staging import TransientStorage

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _acquire_image(request, storage: TransientStorage):
    """Stage the uploaded file or the image behind imageUrl. Returns None if neither was sent."""
    upload = request.files.get('image') if request.files else None
    if upload is not None and upload.filename:
        return storage.store_upload(upload, max_size=config.MAX_FILE_SIZE)

    request_json = request.get_json(silent=True) or {}
    image_url = request_json.get('imageUrl') or (request.form.get('imageUrl') if request.form else None)
    if image_url:
        return download_image(image_url.strip(), storage)

    return None


@functions_framework.http
def analyze_clothing(request):
    """
    Main Cloud Function entry point.

    Accepts either multipart/form-data with an "image" file, or JSON:
    {
        "imageUrl": "https://example.com/outfit.jpg"
    }

    Optional query parameter ?lang=es|en|pt|fr|it|de selects the tag language.
    """
    if request.method == 'OPTIONS':
        return preflight_response('POST')

    if request.method != 'POST':
        return error_response('Method not allowed', 405)

    lang = resolve_language(request.args.get('lang'))
    storage = TransientStorage(config.UPLOAD_DIR)

    try:
        staged = _acquire_image(request, storage)
    except UploadTooLargeError as e:
        return error_response(str(e), 413)
    except (LookAnalystError, ValueError) as e:
        logger.warning("Could not acquire image: %s", e)
        return error_response(str(e), 400)
    except Exception as e:
        logger.exception("Unexpected error acquiring image")
        return error_response('Internal server error', 500, details=str(e))

    if staged is None:
        return error_response('An image is required (file upload or imageUrl).', 400)

    logger.info("Staged image %s", staged.describe())

    with staged:
        try:
            result = analyze_image(staged, lang)
        except AnalysisError as e:
            return error_response('Internal server error while analyzing the image', 500, details=str(e))
        except Exception as e:
            logger.exception("Unexpected error analyzing %s", staged.path)
            return error_response('Internal server error', 500, details=str(e))

    response = {'success': True}
    response.update(result)
    return json_response(response)
