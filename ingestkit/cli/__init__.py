"""Command-line tools for ingestkit.

- ``python -m ingestkit.cli ingest --path DIR`` -- run the standard
  pipeline over a directory and print a summary.
- ``python -m ingestkit.cli config`` -- show the resolved settings.
"""
