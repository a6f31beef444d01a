"""Brand-prompt analysis pipeline.

Staged, non-raising decomposition of a provider answer:
  1. Prompt Builder (sentinel-token output contract)
  2. Response Decomposer (narrative / analysis segment)
  3. Metrics Parser (sentiment, position, visibility, competitor mentions)
  4. Resource Extractor (structured block, bare URLs, href attributes)

Input:  AnalysisRequest + enabled ProviderConfigs
Output: AnalysisOutcome (narrative, analysis, resources)
"""
