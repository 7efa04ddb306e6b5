"""Grid-based multiplayer arena shooter: game model, Flask game server and HTTP client."""

__version__ = "0.1.0"