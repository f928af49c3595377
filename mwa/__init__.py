"""
Multi-Winner Auction engine (MWA)

An ascending, time-boxed, single-item auction with N winners:
- Owner-controlled lifecycle (open -> closed, one-way)
- Strict bid increment rule with overflow-checked arithmetic
- Deterministic top-N winner selection
- Pluggable ledger, clock and event sink collaborators
"""
