"""Menubar client summarising recent git activity across local projects."""

__version__ = "1.0.0"
