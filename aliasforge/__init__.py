"""AliasForge - keep your shell aliases in one place and export them anywhere"""

__version__ = "0.3.0"
