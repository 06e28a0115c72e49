"""
Record store backends.

- client.py: hosted API over httpx
- memory.py: in-process store for demo runs and tests
"""
