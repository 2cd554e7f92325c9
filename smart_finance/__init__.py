"""
Smart Finance - Source Package

A small personal-finance record keeper. Transactions are stored per user
in a single flat comma-delimited file and queried in memory.

DESIGN PRINCIPLES:
1. One file, one owner: only the transaction store touches the disk
2. Reads degrade to empty results, writes are all-or-nothing
3. No silent corrections
4. Every mutation is auditable
"""

__version__ = "1.0.0"
__author__ = "Smart Finance Team"
