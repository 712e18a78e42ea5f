"""Extraction pipeline services: Notion access, tiers, batching, aggregation, delivery."""
