"""
Command line host for the ingestion service.
"""
