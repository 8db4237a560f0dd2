"""
Chart Analyzer
Uploads a market chart to Gemini Vision and returns a structured verdict.
"""

__version__ = "1.0.0"
