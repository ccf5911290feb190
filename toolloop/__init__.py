"""
toolloop: a bounded tool-calling loop between a user, a language model and tools
"""

__version__ = "0.1.0"
