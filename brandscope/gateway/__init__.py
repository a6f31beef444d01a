"""LLM provider gateway.

Uniform invocation over heterogeneous HTTP providers:
  - Provider configuration and response DTOs
  - Vendor-specific adapters (auth, payload shape, response envelope)
  - Provider selection by preference order
"""
