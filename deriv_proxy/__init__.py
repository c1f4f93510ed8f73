"""HTTP/SSE proxy between a browser trading dashboard and the Deriv WebSocket API."""
