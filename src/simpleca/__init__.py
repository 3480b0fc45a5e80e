"""
simpleca — a small certificate authority for RSA-2048 / SHA-256 X.509 material.

Creates self-signed CA certificates, certificate signing requests carrying
requested extensions, and CA-signed server/client certificates derived from
a request plus CA-mandated policy extensions.

Built on the Railway-Oriented Programming (ROP) primitives in
simpleca.railway: every operation returns a Result instead of raising.
"""

__version__ = "0.1.0"
