"""Outbound enrichment tools: link reader and Telegraph publisher."""
