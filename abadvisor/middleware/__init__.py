from abadvisor.middleware.telemetry import TelemetryMiddleware

__all__ = ["TelemetryMiddleware"]
