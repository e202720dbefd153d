"""Request dispatch and the HTTP, WebSocket and stdio transports."""
