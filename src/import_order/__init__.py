"""
import-order - canonical import and declaration ordering for JavaScript,
TypeScript and Svelte sources
"""

__version__ = "1.0.0"
