"""
Presentation layer exposing the upload relay over HTTP.
"""
