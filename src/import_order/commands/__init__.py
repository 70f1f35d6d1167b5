"""
Command handlers behind the CLI
"""
