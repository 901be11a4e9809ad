"""LLM providers and prompts."""
