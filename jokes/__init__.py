"""jokes/ -- Joke storage for Jokebox.

Layer rule: jokes/ imports only stdlib, third-party libraries and core/.
Ownership decisions live in auth/ownership.py; this package only records
the owner id it is given.
"""
