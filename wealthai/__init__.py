"""
WealthAI - Source Package

A personal finance assistant: a one-time financial profile, a computed
monthly summary, and an AI advisor that answers with the user's own numbers.

DESIGN PRINCIPLES:
1. One profile document per user, nothing else persisted
2. Fail visibly: every failure becomes a message in the current page
3. Pages are plain Python controllers; Streamlit only renders them
4. Storage backend is swappable
"""

__version__ = "1.0.0"
__author__ = "WealthAI Team"
