"""
Configuration, logging, credentials, auth and error types shared by the backend.
"""
