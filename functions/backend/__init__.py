"""
Backend package for the smoke-free tracker.

Holds the storage handle, notification sender, configuration and a FastAPI
application that serves the same operations as the Cloud Functions for
self-hosted deployments.
"""
