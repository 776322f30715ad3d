"""Process-wide symbol table backing the ``atom`` and ``safe_atom`` types.

``atom`` conversions may create new symbols; ``safe_atom`` conversions may
only find existing ones. Keeping the two capabilities separate lets callers
bound the table's growth by never feeding untrusted input to ``intern``.
"""

from __future__ import annotations

import threading


class Symbol(str):
    """An interned string. Equal names share one ``Symbol`` object."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"Symbol({str.__repr__(self)})"


class SymbolTable:
    """Thread-safe registry of interned symbols."""

    def __init__(self) -> None:
        """Initialize an empty symbol table."""
        self._symbols: dict[str, Symbol] = {}
        self._lock = threading.Lock()

    def intern(self, name: str) -> Symbol:
        """Return the symbol for ``name``, creating it if needed."""
        with self._lock:
            symbol = self._symbols.get(name)
            if symbol is None:
                symbol = self._symbols[name] = Symbol(name)
            return symbol

    def lookup(self, name: str) -> Symbol | None:
        """Return the symbol for ``name`` only if it already exists."""
        with self._lock:
            return self._symbols.get(name)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._symbols

    def __len__(self) -> int:
        with self._lock:
            return len(self._symbols)


default_symbol_table = SymbolTable()
