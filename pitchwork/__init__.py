"""pitchwork: pitch resolution and scoped pitch transformations for singing voices."""

__version__ = "0.1.0"
