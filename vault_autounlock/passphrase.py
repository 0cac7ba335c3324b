"""
Passphrase — Mutable secret buffer with wipe-on-exit.

A passphrase is held as a ``bytearray`` of UTF-8 encoded characters so it can
be overwritten in place. Use it as a context manager: the buffer is wiped on
every exit path of the ``with`` block, including exceptions and task
cancellation.

Security Note:
    Python strings are immutable and cannot be wiped. Sources that only
    return ``str`` (e.g. the OS keyring) leave a copy in memory until it is
    garbage collected. This is an accepted limitation.
"""
from typing import Union

FILLER = 0x20  # ' '


class Passphrase:
    """Wipeable passphrase buffer."""

    __slots__ = ("_buffer", "_wiped")

    def __init__(self, secret: Union[bytes, bytearray, str]):
        if isinstance(secret, str):
            secret = secret.encode("utf-8")
        self._buffer = bytearray(secret)
        self._wiped = False

    @classmethod
    def wrap(cls, buffer: bytearray) -> "Passphrase":
        """Take ownership of ``buffer`` without copying it.

        The caller must not keep using ``buffer``; it is overwritten when the
        passphrase is wiped.
        """
        instance = cls.__new__(cls)
        instance._buffer = buffer
        instance._wiped = False
        return instance

    @property
    def wiped(self) -> bool:
        return self._wiped

    def __len__(self) -> int:
        return len(self._buffer)

    def __repr__(self) -> str:
        state = "wiped" if self._wiped else "set"
        return f"<Passphrase [{state}] len={len(self._buffer)}>"

    def view(self) -> memoryview:
        """Return a read-only view on the raw UTF-8 bytes.

        Raises:
            ValueError: If the passphrase was already wiped.
        """
        if self._wiped:
            raise ValueError("Passphrase has been wiped")
        return memoryview(self._buffer).toreadonly()

    def reveal(self) -> str:
        """Decode the passphrase to a ``str`` for APIs that need one.

        The returned string cannot be wiped; prefer :meth:`view`.
        """
        return bytes(self.view()).decode("utf-8")

    def wipe(self) -> None:
        """Overwrite every byte of the buffer with the filler value."""
        for i in range(len(self._buffer)):
            self._buffer[i] = FILLER
        self._wiped = True

    def __enter__(self) -> "Passphrase":
        return self

    def __exit__(self, *exc_info) -> None:
        self.wipe()
