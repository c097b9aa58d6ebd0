from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional, Protocol, runtime_checkable

from pydantic import AnyUrl


@runtime_checkable
class StoreProtocol(Protocol):
    """Flat string-keyed store consumed by the codecs in `stored_lib.codecs`.

    Generic `get`/`set` move opaque objects; the typed getters convert the
    stored object the way a platform settings store does and return `None`
    when no value exists or it cannot be converted. `set(key, None)` removes
    the key. See `stored_lib.store.KeyValueStore` for the implementation.
    """

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...

    def contains(self, key: str) -> bool: ...

    def keys(self) -> Iterable[str]: ...

    def get_int(self, key: str) -> Optional[int]: ...

    def set_int(self, key: str, value: int) -> None: ...

    def get_bool(self, key: str) -> Optional[bool]: ...

    def set_bool(self, key: str, value: bool) -> None: ...

    def get_float(self, key: str) -> Optional[float]: ...

    def set_float(self, key: str, value: float) -> None: ...

    def get_double(self, key: str) -> Optional[float]: ...

    def set_double(self, key: str, value: float) -> None: ...

    def get_string(self, key: str) -> Optional[str]: ...

    def get_url(self, key: str) -> Optional[AnyUrl]: ...

    def set_url(self, key: str, value: AnyUrl) -> None: ...

    def get_string_list(self, key: str) -> Optional[List[str]]: ...

    def get_list(self, key: str) -> Optional[List[Any]]: ...

    def get_dict(self, key: str) -> Optional[Dict[Any, Any]]: ...
