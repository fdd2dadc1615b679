"""
HTTP API: admin login, class-sheet and replication routes.
"""
