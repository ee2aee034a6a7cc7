"""
Back-office Kernel

Record-keeping core for companies, projects, contracts, invoices, payments
and transactions, with:
- Typed record models over a relational store
- Graph-driven cascading deletion of a project and its dependents
- Atomic unit-of-work execution with whole-cascade retry
- Structured deletion reports for the HTTP layer
"""

__version__ = "0.1.0"
