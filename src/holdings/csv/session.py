"""Import session: the explicit, immutable set of files being imported."""

from dataclasses import dataclass
from typing import Iterable, Optional

from holdings.csv.aggregator import ImportFile, aggregate_files
from holdings.domain.views import ParseResult


@dataclass(frozen=True)
class ImportSession:
    """
    Files accumulated for one import, in upload order.

    Adding a file returns a new session; parsing always re-reads every
    file so the result is a pure function of the file set.
    """

    files: tuple[ImportFile, ...] = ()
    cash_symbols: Optional[tuple[str, ...]] = None

    @classmethod
    def from_files(
        cls,
        files: Iterable[tuple[str, str]],
        cash_symbols: Optional[Iterable[str]] = None,
    ) -> "ImportSession":
        return cls(
            files=tuple(ImportFile(name=name, text=text) for name, text in files),
            cash_symbols=tuple(cash_symbols) if cash_symbols is not None else None,
        )

    def add_file(self, name: str, text: str) -> "ImportSession":
        """Return a new session with one more file."""
        return ImportSession(
            files=self.files + (ImportFile(name=name, text=text),),
            cash_symbols=self.cash_symbols,
        )

    @property
    def file_names(self) -> list[str]:
        return [f.name for f in self.files]

    @property
    def is_empty(self) -> bool:
        return not self.files

    def parse(self) -> ParseResult:
        return aggregate_files(self.files, cash_symbols=self.cash_symbols)
