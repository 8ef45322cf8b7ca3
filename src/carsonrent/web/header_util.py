"""Alert headers telling the UI what happened to an entity."""


class AlertHeaders:
    """Builds ``X-{app}-alert``, ``X-{app}-error`` and ``X-{app}-params`` headers."""

    def __init__(self, application_name: str) -> None:
        self._application_name = application_name

    @property
    def application_name(self) -> str:
        return self._application_name

    def alert(self, message: str, param: str) -> dict[str, str]:
        return {
            f"X-{self._application_name}-alert": message,
            f"X-{self._application_name}-params": param,
        }

    def entity_creation(self, entity_name: str, param: str) -> dict[str, str]:
        return self.alert(f"{self._application_name}.{entity_name}.created", param)

    def entity_update(self, entity_name: str, param: str) -> dict[str, str]:
        return self.alert(f"{self._application_name}.{entity_name}.updated", param)

    def entity_deletion(self, entity_name: str, param: str) -> dict[str, str]:
        return self.alert(f"{self._application_name}.{entity_name}.deleted", param)

    def failure(self, entity_name: str, error_key: str) -> dict[str, str]:
        return {
            f"X-{self._application_name}-error": f"error.{error_key}",
            f"X-{self._application_name}-params": entity_name,
        }
