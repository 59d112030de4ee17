"""
External service plumbing.

- http.py - pre-configured ``requests.Session`` and the blocking GET transport
"""
