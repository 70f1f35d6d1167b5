"""
Ordering engine, configuration and file processing
"""
