"""
Parsing of the numbered tag lists returned by the garment model.

Expected lines look like:
    1: [blazer, gris, estampado cuadros, semi-largo, tweed]
    2: [pantalón, negro, skinny, denim, ajustado]

The model does not always follow the format, so anything else is skipped.
"""

import re
from typing import List

TAG_LINE_PATTERN = re.compile(r'^\d+:\s*\[(.+)\]$')


def parse_clothing_tags(text: str) -> List[List[str]]:
    """
    Parse model output into one tag list per detected garment.

    Args:
        text: Raw model response

    Returns:
        Tag lists in line order, one per matching line. Items are trimmed
        but kept even when empty. Empty when no line matched, which means
        either no garments or an off-format response, never an error.

    Examples:
        >>> parse_clothing_tags("1: [blazer, gris]\\nnoise")
        [['blazer', 'gris']]
    """
    if not text:
        return []

    clothing_tags = []
    for line in text.splitlines():
        match = TAG_LINE_PATTERN.match(line.strip())
        if not match:
            continue
        clothing_tags.append([tag.strip() for tag in match.group(1).split(',')])

    return clothing_tags
