from shotgate.web.app import ShotGateWebApp

__all__ = ["ShotGateWebApp"]
