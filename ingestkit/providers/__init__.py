"""Concrete adapters for the ingestion interfaces.

- **source** -- file-system document source.
- **writer** -- in-memory document writer.
- **resilience** -- retry decorators for LLM and embedding providers.
"""
