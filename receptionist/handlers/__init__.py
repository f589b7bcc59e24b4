"""
Request handlers behind the backend HTTP endpoints.

Key components:
- session_handlers: Issues single-use provider credentials together with the
  persona's session configuration.
- function_handlers: Runs the agent's tool calls (availability, booking,
  cancellation, business info) and wraps their results.

Usage examples:
```python
from receptionist.handlers import function_handlers, session_handlers

@app.post("/api/realtime/session")
async def create_session(request: SessionRequest):
    return await session_handlers.handle_session_request(request, broker)
```
"""

# Handlers module initialization
