"""DeepCogs — analytics and discovery for Discogs vinyl collections."""

__version__ = "0.1.0"
