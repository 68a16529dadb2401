"""Allow ``python -m ingestkit.cli`` execution."""

from ingestkit.cli.ingest import main

main()
