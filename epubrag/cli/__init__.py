"""Command-line tools for epubrag.

- ``python -m epubrag.cli ingest`` - embed an EPUB into a store file
- ``python -m epubrag.cli search`` / ``ask`` - query a store
- ``python -m epubrag.cli inspect`` - print an EPUB as Markdown
- ``python -m epubrag.cli stats`` - summarise a store
"""
