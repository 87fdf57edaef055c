"""Key prefixing for grouping rate limiter keys under a namespace.

A ``Namespace("@api")`` turns the key ``"login"`` into ``"@api:_rt:login"``.
The root identifier marks where the namespace ends, so keys cannot contain it.
"""

from collections.abc import Sequence

from .config import RATEWARDEN_SETTINGS


class Key:
    """A key bound to a namespace prefix."""

    def __init__(self, key: str, *, prefix: Sequence[str], delimiter: str):
        self._key = key
        self._prefix = tuple(prefix)
        self._delimiter = delimiter

    def get(self) -> str:
        """The key as given by the caller, without prefix."""
        return self._key

    def __str__(self) -> str:
        return self._delimiter.join([*self._prefix, self._key])

    def __repr__(self) -> str:
        return f"Key({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Key):
            return NotImplemented
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(str(self))


class Namespace:
    """Builds namespace-qualified keys.

    Parameters
    ----------
    root : str | Sequence[str]
        One or more root segments. An empty root disables prefixing.
    delimiter : str | None
        Separator between segments. Defaults to ``RATEWARDEN_NAMESPACE_DELIMITER``.
    root_identifier : str | None
        Marker appended after the root. Defaults to
        ``RATEWARDEN_NAMESPACE_ROOT_IDENTIFIER``.

    Examples
    --------
    >>> namespace = Namespace("@api")
    >>> str(namespace)
    '@api:_rt'
    >>> str(namespace.create("login"))
    '@api:_rt:login'
    """

    def __init__(
        self,
        root: str | Sequence[str] = "",
        *,
        delimiter: str | None = None,
        root_identifier: str | None = None,
    ):
        roots = [root] if isinstance(root, str) else list(root)
        self._root = tuple(segment for segment in roots if segment)
        self._delimiter = (
            delimiter
            if delimiter is not None
            else RATEWARDEN_SETTINGS.namespace_delimiter
        )
        self._root_identifier = (
            root_identifier
            if root_identifier is not None
            else RATEWARDEN_SETTINGS.namespace_root_identifier
        )

    @property
    def delimiter(self) -> str:
        return self._delimiter

    @property
    def root_identifier(self) -> str:
        return self._root_identifier

    def append_root(self, root: str | Sequence[str]) -> "Namespace":
        extra = [root] if isinstance(root, str) else list(root)
        return Namespace(
            [*self._root, *extra],
            delimiter=self._delimiter,
            root_identifier=self._root_identifier,
        )

    def prepend_root(self, root: str | Sequence[str]) -> "Namespace":
        extra = [root] if isinstance(root, str) else list(root)
        return Namespace(
            [*extra, *self._root],
            delimiter=self._delimiter,
            root_identifier=self._root_identifier,
        )

    def _prefix(self) -> list[str]:
        if not self._root:
            return []
        return [self._delimiter.join(self._root), self._root_identifier]

    def create(self, key: str) -> Key:
        if self._root and self._root_identifier in key:
            raise ValueError(
                f"Key '{key}' cannot include the root identifier '{self._root_identifier}'"
            )
        return Key(key, prefix=self._prefix(), delimiter=self._delimiter)

    def __str__(self) -> str:
        return self._delimiter.join(self._prefix())

    def __repr__(self) -> str:
        return f"Namespace({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Namespace):
            return NotImplemented
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(str(self))
