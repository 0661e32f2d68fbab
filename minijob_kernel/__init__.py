"""
Minijob Kernel

Core of the minijob earnings tracker:
- Billing periods with arbitrary start and end days
- Exact cent arithmetic on Decimal, never float
- Carry-forward of earnings above the statutory monthly limit
- Injected clock, no ambient state
"""

__version__ = "0.1.0"
