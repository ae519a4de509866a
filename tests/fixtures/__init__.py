"""Test fixtures for nativedep tests.

Fixtures are organized by type:

- libraries: a fake library identity, platform descriptors and a cache layout
- archives: builders for .tar.gz/.zip archives and bucket listings

Import fixtures in your tests using:
    from tests.fixtures.libraries import identity, linux_platform
    from tests.fixtures.archives import make_tar_gz, make_listing
"""

__all__ = [
    "libraries",
    "archives",
]
