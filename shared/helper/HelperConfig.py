import logging
import os
from typing import Any

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off")


class HelperConfig:
    """Typed access to the environment. Every setting of the bridge is read through here.

    Keys are case-insensitive. An empty variable counts as unset, and an unset
    variable without a default is a configuration error.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def _read_raw(self, key: str) -> str | None:
        return os.getenv(key.upper()) or None

    def _missing(self, key: str, default: Any) -> Any:
        if default is None:
            raise ValueError(f"Environment variable '{key.upper()}' is not set.")
        return default

    ##########################################
    ################ GETTER ##################
    ##########################################

    def get_string_val(self, key: str, default: str | None = None) -> str:
        """
        Raises:
            ValueError: If the variable is not set and no default is given.
        """
        raw = self._read_raw(key)
        return raw.strip() if raw is not None else self._missing(key, default)

    def get_number_val(self, key: str, default: float | int | None = None) -> float | int:
        """Read an int, or a float when the value contains a dot.

        Raises:
            ValueError: If the variable is not set and no default is given, or is not numeric.
        """
        raw = self._read_raw(key)
        if raw is None:
            return self._missing(key, default)
        raw = raw.strip()
        try:
            return float(raw) if "." in raw else int(raw)
        except ValueError:
            raise ValueError(f"Environment variable '{key.upper()}' is not a valid number: '{raw}'.") from None

    def get_int_val(self, key: str, default: int | None = None) -> int:
        return int(self.get_number_val(key, default=default))

    def get_bool_val(self, key: str, default: bool | None = None) -> bool:
        """
        Accepts true/1/yes/on and false/0/no/off in any case.

        Raises:
            ValueError: If the variable is not set and no default is given, or holds another value.
        """
        raw = self._read_raw(key)
        if raw is None:
            return self._missing(key, default)
        value = raw.strip().lower()
        if value in _TRUE_VALUES:
            return True
        if value in _FALSE_VALUES:
            return False
        raise ValueError(f"Environment variable '{key.upper()}' is not a valid boolean: '{raw}'.")

    def get_list_val(self, key: str, default: list[str] | None = None, separator: str = ",") -> list[str]:
        """Read a bracketed list such as "[en,de]". Blank elements are dropped.

        Raises:
            ValueError: If the variable is not set and no default is given, or is not bracketed.
        """
        raw = self._read_raw(key)
        if raw is None:
            return self._missing(key, default)
        raw = raw.strip()
        if not (raw.startswith("[") and raw.endswith("]")):
            raise ValueError(f"Environment variable '{key.upper()}' must be in the format '[elem1{separator}elem2]'. Got: '{raw}'")
        return [element.strip() for element in raw[1:-1].split(separator) if element.strip()]

    def get_logger(self) -> logging.Logger:
        return self._logger
