"""
Feed Percolator - merge syndication feeds into one filtered, deduplicated feed.

This package fetches RSS/Atom sources concurrently, runs every item through an
ordered filter chain, drops duplicates by id, title and link, and writes the
survivors as a single Atom feed ordered by publish time.
"""

__version__ = "0.1.0"
