"""
javawatch: Java Release Tracker

A small batch job that scrapes the public Java download page, extracts the
current release (version, release date, per-platform downloads) and keeps a
versioned JSON record of every release it has seen.
"""

__version__ = "1.0"
__author__ = "javawatch Project"
__description__ = "Java Release Tracker"
