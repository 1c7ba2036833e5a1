"""
Infrastructure layer for the Drive Relay application.

Concrete implementations of the core contracts: configuration, logging,
session storage, credential providers, the Google Drive client and the
upload manager.
"""
