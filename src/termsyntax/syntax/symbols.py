"""Symbol intern table.

Symbols are the enumerated, atom-like values produced by the ``atom`` and
``enum`` rules. A symbol can only be obtained for a name that was interned
beforehand (normally while compiling schemas at startup); lookups of unknown
names fail instead of creating new symbols from input data.
"""

import threading


class Symbol(str):
    """An interned name.

    Symbols compare and hash like their text, so they can be used wherever a
    plain string is expected, while ``isinstance(value, Symbol)`` still tells a
    symbolic value apart from free text.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return f"Symbol({str.__repr__(self)})"


class SymbolTable:
    """Bidirectional table between names and their interned :class:`Symbol`.

    Writes only happen through :meth:`intern`; :meth:`lookup` is lock free.
    """

    def __init__(self, names: list[str] | None = None):
        self._symbols: dict[str, Symbol] = {}
        self._lock = threading.Lock()
        for name in names or []:
            self.intern(name)

    def intern(self, name: str) -> Symbol:
        """Return the symbol for *name*, creating it if needed."""
        existing = self._symbols.get(name)
        if existing is not None:
            return existing
        with self._lock:
            return self._symbols.setdefault(name, Symbol(name))

    def lookup(self, name: str) -> Symbol | None:
        """Return the existing symbol for *name*, or ``None``."""
        return self._symbols.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._symbols

    def __len__(self) -> int:
        return len(self._symbols)


# Names every deployment knows about
symbols = SymbolTable(
    [
        "true",
        "false",
        "none",
        "debug",
        "info",
        "notice",
        "warning",
        "error",
        "critical",
        "alert",
        "emergency",
    ]
)
