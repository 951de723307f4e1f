from jarvis_api.api.server import StatsServer, create_app

__all__ = ["StatsServer", "create_app"]
