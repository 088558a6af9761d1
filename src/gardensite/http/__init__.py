"""HTTP primitives: immutable headers, query params, request, and response."""
