"""
This package contains the modules related to this library's use of
persistent storage: the association store interface, the reference
in-memory store and nonce generation.

@sort: interface, memstore, nonce
"""

__all__ = ['interface', 'memstore', 'nonce']
