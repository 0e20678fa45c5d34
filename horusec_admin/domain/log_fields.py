"""Leveled logger adapter carrying structured fields."""

import logging
from typing import Any, Mapping, MutableMapping, Optional

ROOT_LOGGER_NAME = "horusec_admin"


class FieldLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that injects a component name and structured fields into records."""

    def __init__(
        self, logger: logging.Logger, fields: Optional[Mapping[str, Any]] = None
    ) -> None:
        super().__init__(logger, dict(fields or {}))

    @property
    def fields(self) -> dict[str, Any]:
        return dict(self.extra)

    def with_field(self, key: str, value: Any) -> "FieldLoggerAdapter":
        """Return a new adapter with ``key`` added to the structured fields."""
        fields = dict(self.extra)
        fields[key] = value
        return FieldLoggerAdapter(self.logger, fields)

    def with_error(self, error: BaseException) -> "FieldLoggerAdapter":
        return self.with_field("error", str(error)).with_field(
            "error_type", type(error).__name__
        )

    def fatal(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log at critical severity; terminating the process is left to the caller."""
        self.critical(msg, *args, **kwargs)

    def warn(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self.warning(msg, *args, **kwargs)

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        """Add the component name and merged fields to the extra dict."""
        if "extra" not in kwargs:
            kwargs["extra"] = {}
        else:
            kwargs["extra"] = dict(kwargs["extra"])

        fields = dict(self.extra)
        fields.update(kwargs["extra"].pop("fields", {}))
        kwargs["extra"]["fields"] = fields

        logger_name = self.logger.name
        if logger_name.startswith(ROOT_LOGGER_NAME + "."):
            component = logger_name[len(ROOT_LOGGER_NAME) + 1 :]
        else:
            component = logger_name
        kwargs["extra"]["component"] = component

        return msg, kwargs


def with_prefix(name: str) -> FieldLoggerAdapter:
    """Return the adapter for the ``horusec_admin.<name>`` logger."""
    return FieldLoggerAdapter(logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}"))
