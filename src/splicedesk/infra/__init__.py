"""
Infrastructure layer - logging, settings, and error types.

This layer contains technical concerns shared by the runtime, the CLI
and the HTTP API.
"""
