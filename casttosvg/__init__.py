"""Render asciicast recordings as SVG documents"""

__version__ = '0.1.0'
