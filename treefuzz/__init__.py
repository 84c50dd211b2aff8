"""
treefuzz: Grammar-Based Test Input Generator
"""

__version__ = "0.1.0"
__author__ = "treefuzz Development Team"
