"""
ProofPay Test Suite
===================

Test organization:
- tests/unit/          - Unit tests (no network; mock chain and HTTP transports)

Run tests:
    pytest                          # All tests
    pytest tests/unit               # Unit tests only
    pytest --cov=proofpay           # With coverage
"""
