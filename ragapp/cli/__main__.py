"""Allow ``python -m ragapp.cli`` as a shortcut for ``python -m ragapp.cli.ingest``."""

from ragapp.cli.ingest import main

main()
