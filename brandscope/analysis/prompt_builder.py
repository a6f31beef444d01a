"""Prompt Builder: renders the outbound analysis prompt.

The sentinel tokens below are the wire contract with the response
decomposer; changing them breaks parsing of every provider answer.
"""

from __future__ import annotations

from collections.abc import Sequence

HTML_RESPONSE_START = "HTML_RESPONSE_START"
HTML_RESPONSE_END = "HTML_RESPONSE_END"
ANALYSIS_START = "ANALYSIS_START"
ANALYSIS_END = "ANALYSIS_END"

RESOURCE_TYPE_VOCABULARY = (
    "competitor_website",
    "industry_report",
    "news_article",
    "documentation",
    "blog_post",
    "research_paper",
    "social_media",
    "marketplace",
    "review_site",
    "other",
)

_TEMPLATE = """\
Given a brand [{brand}], a comma-separated list of competitors [{competitors}], and a single phrase [{phrase}], generate two outputs:

1. An AI-generated response to the phrase in HTML format, as it would appear in an AI search answer. Mention relevant brands naturally and link to the sources you rely on.

2. A detailed analysis of how the brand appears in that response, with the resources you referenced categorized by type.

Format your answer exactly as follows:

{html_start}
[The HTML response to the phrase]
{html_end}

{analysis_start}
Resources:
- URL: [full URL of the resource]
- Type: [{types}]
- Title: [title of the resource]
- Description: [one-sentence description of the resource]
(repeat the URL/Type/Title/Description block for every resource)

Brand_Sentiment: [Positive/Neutral/Negative with score 1-10]
Brand_Position: [Percentage 0-100 of how prominently the brand is positioned, e.g. 35%]
Brand_Visibility: [Visibility score 1-10]
Competitor_Mentions: [JSON object mapping each competitor name to its number of mentions, e.g. {{"Competitor": 2}}]
{analysis_end}
"""


def build_analysis_prompt(brand_name: str, competitor_names: Sequence[str], phrase: str) -> str:
    """Render the analysis prompt for one brand/phrase pair."""
    competitors = ", ".join(name.strip() for name in competitor_names if name and name.strip())
    return _TEMPLATE.format(
        brand=brand_name.strip(),
        competitors=competitors,
        phrase=phrase.strip(),
        types="|".join(RESOURCE_TYPE_VOCABULARY),
        html_start=HTML_RESPONSE_START,
        html_end=HTML_RESPONSE_END,
        analysis_start=ANALYSIS_START,
        analysis_end=ANALYSIS_END,
    )
