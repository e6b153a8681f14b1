"""
Data Ingestion Module
"""
