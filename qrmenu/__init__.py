"""
                        QR Menu

Multi-tenant restaurant menu backend: owners sign in with an emailed
one-time password, manage restaurants, categories and dishes, and
publish a public menu reachable from a QR code.
"""

__version__ = "1.0.0"
