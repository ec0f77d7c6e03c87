"""Integration tests for the API and full session workflows over HTTP.

Agent service is scripted unless a test is marked requires_api_key.
"""
