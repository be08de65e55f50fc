"""
Core dispatch logic: URL classification, magnet parsing, profile matching
and routing to service adapters.
"""
