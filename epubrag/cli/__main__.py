"""Allow ``python -m epubrag.cli`` execution."""

from epubrag.cli.rag import main

main()
