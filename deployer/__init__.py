"""Upload a zipped project and commit its files to a GitHub repository."""

__version__ = "1.0.0"
