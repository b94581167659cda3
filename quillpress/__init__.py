"""
quillpress — Article editor core for a blogging platform.

Images inserted, pasted or dropped into an article are staged locally and
only uploaded when the article is saved. Uploads run concurrently; the
article body is rewritten to permanent URLs only if every upload succeeds.
"""

__version__ = "1.0.0"
