"""
Composite Analysis Service package.

The service sits behind the gateway and serves the composite read path of
accessibility audits (analysis -> results -> errors), enforcing:
- Trust boundary: a pre-shared gateway secret on every request
- Identity: gateway X-User-* headers, falling back to bearer-token claims
- Ownership: callers only see their own analyses unless they are admins

Structure:
- app.main: FastAPI app, routes, and middleware wiring.
- app.middleware: Gateway secret gate and user context middleware.
- app.identity: Request identity model and its resolution sources.
- app.adapters: HTTP clients for the analysis/result/error record services.
- app.domain: Composite aggregation and access-control policy.
"""
