"""
API Docs Cloud Function

Serves the API index as JSON and a static HTML documentation page.
"""

import functions_framework
import os
import sys

# Add shared module to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from lookanalyst import config
from lookanalyst.http_utils import html_response, json_response, preflight_response

DOCS_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>LookAnalyst API - Documentation</title>
    <style>
        body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; background: #f8f9fa; margin: 0; }}
        .container {{ max-width: 1000px; margin: 0 auto; padding: 20px; }}
        .content {{ background: white; padding: 2rem; border-radius: 10px; box-shadow: 0 4px 6px rgba(0, 0, 0, 0.1); }}
        h1 {{ color: #2c3e50; border-bottom: 3px solid #3498db; padding-bottom: 0.5rem; }}
        h2 {{ color: #34495e; border-bottom: 2px solid #ecf0f1; margin-top: 2rem; }}
        code {{ background: #f1f3f4; border: 1px solid #dadce0; border-radius: 4px; padding: 0.1rem 0.4rem; }}
        pre {{ background: #1e1e1e; color: #d4d4d4; padding: 1rem; border-radius: 8px; overflow-x: auto; }}
        .method {{ background: #e74c3c; color: white; padding: 0.2rem 0.6rem; border-radius: 6px; font-weight: 600; }}
    </style>
</head>
<body>
<div class="container"><div class="content">
    <h1>LookAnalyst API</h1>
    <p>Detects the garments in an image and returns one list of search tags per garment
    (type, colour, style, material, details, cut).</p>
    <p>Add <code>?lang=es|en|pt|fr|it|de</code> to any analysis request to choose the tag
    language. The default is <code>es</code>.</p>

    <h2><span class="method">POST</span> /analyze-clothing</h2>
    <p>Upload an image file (field <code>image</code>, max {max_size_mb}MB, JPG, PNG, GIF or WebP):</p>
    <pre>curl -X POST {base_url}/analyze-clothing \\
  -F 'image=@path/to/image.jpg'</pre>
    <p>Or send a direct image URL:</p>
    <pre>curl -X POST {base_url}/analyze-clothing \\
  -H 'Content-Type: application/json' \\
  -d '{{"imageUrl": "https://example.com/image.jpg"}}'</pre>

    <h2><span class="method">POST</span> /download</h2>
    <p>Analyze the main image of a Pinterest pin (any regional pinterest domain or a
    <code>pin.it</code> shortlink):</p>
    <pre>curl -X POST {base_url}/download \\
  -H 'Content-Type: application/json' \\
  -d '{{"url": "https://www.pinterest.com/pin/5348093303823893/"}}'</pre>
    <p>The response also includes <code>sourceUrl</code>, the resolved <code>imageUrl</code>
    and the <code>strategy</code> that located it.</p>

    <h2>Responses</h2>
    <p>Success:</p>
    <pre>{{
  "success": true,
  "clothingTags": [
    ["blazer", "gris", "estampado cuadros", "semi-largo", "tweed"],
    ["pantalón", "negro", "skinny", "denim", "ajustado"]
  ],
  "count": 2,
  "modelUsed": "{model}"
}}</pre>
    <p>No garments found (still a success):</p>
    <pre>{{
  "success": true,
  "message": "No clothing items found in the image",
  "clothingTags": [],
  "count": 0,
  "modelUsed": "{model}"
}}</pre>
    <p>Errors:</p>
    <pre>{{
  "success": false,
  "error": "Invalid URL. Must be a valid Pinterest URL.",
  "details": "optional extra information"
}}</pre>
    <ul>
        <li><code>400</code> missing or invalid input, non-image upload, image URL that could not be downloaded</li>
        <li><code>404</code> no image found in the Pinterest page</li>
        <li><code>413</code> upload larger than {max_size_mb}MB</li>
        <li><code>502</code> Pinterest page or image could not be fetched</li>
        <li><code>500</code> analysis failure</li>
    </ul>

    <h2>Using the tags</h2>
    <pre>tags = ["blazer", "gris", "estampado cuadros", "semi-largo", "tweed"]
query = " ".join(tags)      # full search
short = " ".join(tags[:2])  # "blazer gris"</pre>
</div></div>
</body>
</html>
"""


def build_index() -> dict:
    """API index: name, version and endpoint map."""
    return {
        'message': 'Clothing Analysis API',
        'version': config.API_VERSION,
        'description': 'Analyzes clothing images and generates individual tags for product searches',
        'endpoints': {
            'GET /docs': 'Full API documentation',
            'POST /analyze-clothing': 'Analyze clothing in an uploaded image or image URL',
            'POST /download': 'Analyze clothing in a Pinterest pin',
        },
        'documentation': f'{config.FRONTEND_URL}/docs',
    }


def render_docs() -> str:
    return DOCS_TEMPLATE.format(
        base_url=config.FRONTEND_URL,
        max_size_mb=round(config.MAX_FILE_SIZE / (1024 * 1024)),
        model=config.GEMINI_MODEL,
    )


@functions_framework.http
def api_docs(request):
    """
    Main Cloud Function entry point.

    GET /docs returns the HTML documentation, any other path the JSON index.
    """
    if request.method == 'OPTIONS':
        return preflight_response('GET')

    if request.path.rstrip('/').endswith('/docs'):
        return html_response(render_docs())

    return json_response(build_index())
