"""
Core layer: domain model, error taxonomy and service contracts.
"""
