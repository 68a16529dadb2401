"""Built-in implementations of the ingestion collaborators.

- **chunking** -- header, section, semantic and token-window strategies.
- **decoders** -- UTF-8 text and Markdown decoders.
- **processors** -- normalization, LLM metadata tagging, chunk summaries.
- **token_counters** -- whitespace and HuggingFace token counters.
"""
