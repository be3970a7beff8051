"""auth/ -- Authentication, session and ownership package for Jokebox.

Layer rule: auth/ imports only stdlib, third-party libraries and core/.
It does NOT import from api/, web/, or jokes/.
api/ and web/ import from auth/, not the other way around.
"""
