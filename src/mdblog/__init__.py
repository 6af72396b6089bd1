"""mdblog - Markdown blog rendering pipeline.

mdblog turns a directory of markdown documents into HTML pages. It runs in
two modes that share one rendering contract:

- Dev mode: an HTTP server renders every page on request
- Batch mode: every page is rendered once and written as a static file
"""

__version__ = "0.1.0"
__author__ = "mdblog Contributors"
