"""
Command-line tools: CSV export of stored risk events.
"""
