"""Response Analysis & Aggregation.

Heuristic pipeline for analyzing raw model responses about one business:
  1. Mention detection (fuzzy name variants)
  2. Sentiment classification (keyword margin)
  3. Rank extraction (numbered lists, recommendation prompts only)
  4. Competitor extraction (numbered lists, recommendation prompts only)
  5. Accuracy placeholder

Aggregation over a full run:
  - Metrics Aggregator (composite visibility score)
  - Leaderboard Builder (competitor frequency ranking)
  - Insights (market position, per-model breakdown, trend)

Input:  ModelResponse text (from the Model Gateway)
Output: AnalyzedResult per response, FingerprintAnalysis per run
"""
