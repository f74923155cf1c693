"""Multilingual lexical/fuzzy ranking engine for product catalogs."""
