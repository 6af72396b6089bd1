"""Test fixtures for mdblog.

This package provides a sample blog project and render components used as
"module:callable" template references.

Sample blog:
- sample_blog/index.html: page shell with the insertion point
- sample_blog/src/content: three posts and a non-markdown file
- sample_blog/templates: project override of the detail template
- sample_blog/public: static assets
"""

from pathlib import Path

# Path to fixtures directory
FIXTURES_DIR = Path(__file__).parent

# Path to the sample blog project
SAMPLE_BLOG_PATH = FIXTURES_DIR / "sample_blog"
