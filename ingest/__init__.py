"""
Knowledge ingestion for the Lagoon Concierge engine.
"""
