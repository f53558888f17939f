"""
Payments Engine - Source Package

Replays a chronological stream of transaction records (deposits,
withdrawals, disputes, resolves, chargebacks) and derives the final
balance state of every client account.

DESIGN PRINCIPLES:
1. One transaction at a time, strictly in arrival order
2. Every transition is atomic - accepted in full or not at all
3. Rejections are reported, never fatal
4. total == available + held, always
5. The engine is swappable behind a single contract
"""

__version__ = "1.0.0"
__author__ = "Payments Engine Team"
