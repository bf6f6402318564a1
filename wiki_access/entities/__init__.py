"""
Page and file entities.

Entities are created through the client, which performs the initial fetch:

    >>> page = await client.get_page("Main Page")
    >>> wiki_file = await client.get_file("Logo.png")
"""

from .file import WikiFile
from .page import WikiPage

__all__ = [
    "WikiFile",
    "WikiPage",
]
