"""PhD Hub backend: doctoral-student community forum, events and research groups."""

__version__ = "1.0.0"
