"""
Food Additive Lens - Matching Core

Main modules:
- catalog: Substance catalog records, loading and lifecycle
- normalization: Query cleaning, ingredient parsing and display formatting
- matching: Alias tables, lexical encoder, similarity scoring and resolution engine
- regulation: Regulation index loading and code/URL resolution
- analysis: End-to-end ingredient text analysis
- utils: Configuration management
"""

__version__ = "1.0.0"
