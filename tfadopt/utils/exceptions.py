from typing import Any


class ApiError(Exception):
    def __init__(self, status_code: int, body: Any) -> None:
        super().__init__(f"API error {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class TransportError(Exception):
    pass


class StateBackendError(Exception):
    pass


class ConfigurationMissingError(Exception):
    pass


class TfvarsValidationError(Exception):
    pass


class ZoneNotFoundError(Exception):
    def __init__(self, zone_name: str) -> None:
        super().__init__(f"zone id not found: {zone_name}")
        self.zone_name = zone_name
