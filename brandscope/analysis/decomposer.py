"""Response Decomposer: splits raw provider text along sentinel tokens.

Missing markers degrade, they never fail:
  - no HTML pair     → narrative is the whole raw text
  - no analysis pair → empty analysis segment (downstream defaults apply)
"""

from __future__ import annotations

import logging
import re

from brandscope.analysis.prompt_builder import (
    ANALYSIS_END,
    ANALYSIS_START,
    HTML_RESPONSE_END,
    HTML_RESPONSE_START,
)
from brandscope.analysis.types import DecomposedResponse

logger = logging.getLogger(__name__)

_HTML_BLOCK = re.compile(
    re.escape(HTML_RESPONSE_START) + r"(.*?)" + re.escape(HTML_RESPONSE_END),
    re.DOTALL,
)
_ANALYSIS_BLOCK = re.compile(
    re.escape(ANALYSIS_START) + r"(.*?)" + re.escape(ANALYSIS_END),
    re.DOTALL,
)


def decompose_response(raw_text: str) -> DecomposedResponse:
    """Split a provider answer into narrative and analysis segment."""
    raw_text = raw_text or ""
    result = DecomposedResponse(narrative=raw_text)

    html_match = _HTML_BLOCK.search(raw_text)
    if html_match:
        result.narrative = html_match.group(1).strip()
        result.has_narrative_markers = True
    else:
        logger.debug("No HTML response markers, using the raw text as narrative")

    analysis_match = _ANALYSIS_BLOCK.search(raw_text)
    if analysis_match:
        result.analysis_segment = analysis_match.group(1).strip()
        result.has_analysis_markers = True
    else:
        logger.debug("No analysis markers in provider response")

    return result
