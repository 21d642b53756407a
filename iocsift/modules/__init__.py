"""
Extraction engine, file parsers and output formatters for iocsift.
"""
