"""Stressy - a research assistant grounded in your own papers, notes and whiteboard."""

__version__ = "0.1.0"
