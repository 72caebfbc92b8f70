"""Streaming Relay Package.

This package bridges persistent WebSocket client connections to an upstream
generative-text service that answers with a chunked event stream. The relay:

- Authenticates each connection and records its session
- Enforces a per-identity quota (one unit per completed relay)
- Forwards text increments to the client in order, as they are decoded
- Cleans up the connection on every termination path

Architecture Overview:
    - server.py: FastAPI application entry point (/ws)
    - lambda_handler.py: API Gateway WebSocket entry point
    - coordinator/: Relay Coordinator, one-slot channel, client frames
    - upstream/: Upstream HTTP client and event-stream decoder
    - stores/: Identity, quota and session stores (memory, DynamoDB)
    - transport/: Push transports (FastAPI WebSocket, API Gateway)
    - prompts/: Request validation and prompt templates
    - handlers/: WebSocket admission, idle watchdog, message loop
    - config/: Configuration modules (environment-based)
    - telemetry/: Sentry and OpenTelemetry metrics

Example:
    $ uvicorn relay.server:app --host 0.0.0.0 --port 8000

Environment Variables:
    Required:
        - ANTHROPIC_KEY: Upstream API key

    Optional:
        - ANTHROPIC_URL / ANTHROPIC_MODEL / ANTHROPIC_VERSION
        - RELAY_STORE_BACKEND: 'memory' or 'dynamodb' (default: 'memory')
        - RELAY_DEV_CREDENTIALS: memory backend seed
        - RELAY_TIMEOUT_S: per-relay deadline (default: 120)
        - RELAY_FRAME_FORMAT: 'json' or 'text' (default: 'json')
        - TRIPADVISOR_TEMPLATE / TAROTREADING_SYSTEM_PROMPT
        - INDEED_TEMPLATE / INDEED_SYSTEM_PROMPT
"""
