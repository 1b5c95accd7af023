from __future__ import annotations


class SdkGenError(Exception):
    """Base class for failures surfaced to the invoking driver."""


class ConfigError(SdkGenError):
    pass


class RouteDocumentError(SdkGenError):
    def __init__(self, source: str, errors: list[str]) -> None:
        self.source = source
        self.errors = list(errors)
        super().__init__(str(self))

    def __str__(self) -> str:
        if not self.errors:
            return f"Invalid route document: {self.source}"
        details = "\n".join(f"  - {error}" for error in self.errors)
        return f"Invalid route document: {self.source}\n{details}"


class ImportCollisionError(SdkGenError):
    def __init__(self, file: str, instance: str, existing: str, incoming: str) -> None:
        self.file = file
        self.instance = instance
        self.existing = existing
        self.incoming = incoming
        super().__init__(str(self))

    def __str__(self) -> str:
        return (
            f"Import collision in {self.file}: {self.instance!r} is imported from both "
            f"{self.existing!r} and {self.incoming!r}"
        )


class TypeNameError(SdkGenError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Cannot resolve a declared type from {name!r}")


class LedgerClosedError(SdkGenError):
    def __init__(self, file: str) -> None:
        self.file = file
        super().__init__(f"Import ledger for {file} is already finalized")
