"""
Tests for the launchpad package.

This package contains tests for:
- Pricing engine math and rounding
- Fee configuration and accounting
- Access gate, ledgers and the atomic scope
- Constant-product venue
- Trading, reentrancy and rollback
- Graduation and migration compensation
- Token registry
- Configuration and models
"""
