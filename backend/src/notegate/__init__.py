"""
NoteGate Backend - Note access control and rating service

Notes can be public, private, or shared through expiring bearer links.
Other users rate them and each note carries a cached rating aggregate.

Version: 1.0.0
"""

__version__ = "1.0.0"
