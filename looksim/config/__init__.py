"""Runtime configuration package.

Scope:
    Environment-driven provider endpoints, polling limits and credential lookup
    shared by the job adapter, provider adapters and HTTP handlers.
"""
