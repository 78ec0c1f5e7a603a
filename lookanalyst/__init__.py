"""Shared pipeline for the LookAnalyst garment-tagging functions."""

from .errors import (
    LookAnalystError,
    NetworkError,
    ExtractionError,
    InvalidContentError,
    ProxyError,
    AnalysisError,
    UploadTooLargeError,
)

from .extractor import (
    STRATEGIES,
    ExtractionResult,
    Strategy,
    extract,
)

from .hosts import (
    is_pinterest_url,
    is_pinterest_host,
)

from .pipeline import (
    ExtractionRequest,
    download_image,
    resolve_pin_image,
)

from .staging import (
    StagedImage,
    TransientStorage,
)

from .tag_parser import parse_clothing_tags

__all__ = [
    # Errors
    'LookAnalystError',
    'NetworkError',
    'ExtractionError',
    'InvalidContentError',
    'ProxyError',
    'AnalysisError',
    'UploadTooLargeError',
    # Extraction
    'STRATEGIES',
    'ExtractionResult',
    'Strategy',
    'extract',
    # Hosts
    'is_pinterest_url',
    'is_pinterest_host',
    # Pipeline
    'ExtractionRequest',
    'download_image',
    'resolve_pin_image',
    # Staging
    'StagedImage',
    'TransientStorage',
    # Tag parsing
    'parse_clothing_tags',
]
