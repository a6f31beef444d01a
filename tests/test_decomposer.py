"""Tests for the response decomposer."""

from brandscope.analysis.decomposer import decompose_response


class TestDecomposeResponse:
    def test_both_segments(self, acme_raw_response):
        result = decompose_response(acme_raw_response)
        assert result.narrative.startswith("<h2>Best gadget</h2>")
        assert result.narrative.endswith("</p>")
        assert result.analysis_segment.startswith("Resources:")
        assert result.analysis_segment.endswith('Competitor_Mentions: {"Widgetco":2}')
        assert result.has_narrative_markers
        assert result.has_analysis_markers

    def test_no_sentinels_narrative_is_raw_text(self):
        raw = "Plain answer with https://example.com in it."
        result = decompose_response(raw)
        assert result.narrative == raw
        assert result.analysis_segment == ""
        assert not result.has_narrative_markers
        assert not result.has_analysis_markers

    def test_missing_analysis_pair(self):
        raw = "HTML_RESPONSE_START <p>Hi</p> HTML_RESPONSE_END trailing"
        result = decompose_response(raw)
        assert result.narrative == "<p>Hi</p>"
        assert result.analysis_segment == ""

    def test_unterminated_analysis_is_ignored(self):
        raw = "HTML_RESPONSE_START x HTML_RESPONSE_END ANALYSIS_START Brand_Position: 10%"
        result = decompose_response(raw)
        assert result.analysis_segment == ""

    def test_first_occurrence_non_greedy(self):
        raw = (
            "HTML_RESPONSE_START first HTML_RESPONSE_END "
            "HTML_RESPONSE_START second HTML_RESPONSE_END"
        )
        assert decompose_response(raw).narrative == "first"

    def test_empty_input(self):
        result = decompose_response("")
        assert result.narrative == ""
        assert result.analysis_segment == ""
