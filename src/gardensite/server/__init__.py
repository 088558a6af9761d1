"""ASGI plumbing: request pipeline, response sending, errors, shutdown, serving."""
