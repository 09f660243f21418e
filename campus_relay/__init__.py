"""
Campus assistant chat relay.

This package contains all application source code organized by responsibility:
- api/      : FastAPI app, routes, CORS
- auth/     : Bearer token verification against Supabase Auth
- core/     : Configuration, logging, exceptions, audit middleware
- llm/      : System prompt, message assembly, provider HTTP client
- models/   : Pydantic request/response schemas
- services/ : Relay handler and provider failover policy
"""
__version__ = "0.1.0"
