"""Prompt Builder: the fixed three-prompt battery sent to every model.

Pipeline:
  1. Industry resolution (category → crawl data → URL, lookup table with fallback pluralization)
  2. Location context (city/state/country, "Unknown" ignored, domain fallback)
  3. Enrichment preview (bounded summary of crawled website data)
  4. Template rendering (factual, opinion, recommendation)
"""
