"""txsign - transaction signing service.

Builds the canonical sign bytes of a standard transaction, signs them with a
named key and returns the transaction with the signature appended.
"""

__version__ = "0.1.0"
