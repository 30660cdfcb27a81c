"""ElectraSim: assignment and sketch-synthesis engine for multi-board circuits."""

__version__ = "0.1.0"
