"""HTTP and WebSocket surface of the Proofline service."""
