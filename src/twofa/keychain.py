from collections.abc import Mapping
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from .utils import MalformedLine


@dataclass(frozen=True)
class KeyRecord:
    name: str
    digits: int
    # base-32 text exactly as stored; decoded only when a code is generated
    secret: str


class KeyStore(Mapping):
    """Read-only mapping of account name -> KeyRecord.

    ``skipped`` lists the MalformedLine errors for lines dropped by a lenient
    parse; it is always empty after a strict parse.
    """

    def __init__(self, records: Dict[str, KeyRecord], *, skipped: Optional[List[MalformedLine]] = None, source: Optional[str] = None):
        self._records = dict(records)
        self._skipped = tuple(skipped or ())
        self._source = source

    @property
    def skipped(self) -> Tuple[MalformedLine, ...]:
        return self._skipped

    @property
    def source(self) -> Optional[str]:
        return self._source

    def __getitem__(self, name: str) -> KeyRecord:
        return self._records[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"KeyStore({sorted(self._records)!r})"


def parse_line(raw_line: bytes) -> Tuple[bytes, bytes, bytes]:
    """Split one keychain line into (name, digits, secret) tokens.

    Trailing whitespace and newline characters, in any mixture, are removed
    first. The remainder must be exactly three non-empty tokens separated by
    single spaces.
    """
    fields = raw_line.rstrip().split(b" ")
    if len(fields) != 3:
        raise MalformedLine(f"expected 3 fields, got {len(fields)}")
    for f in fields:
        # catches empty tokens (doubled spaces) and embedded tabs
        if len(f.split()) != 1:
            raise MalformedLine("empty field or embedded whitespace")
    name, digits, secret = fields
    return name, digits, secret


def _to_record(name: bytes, digits: bytes, secret: bytes) -> KeyRecord:
    if not digits.isdigit():
        raise MalformedLine("digit count is not a non-negative integer")
    try:
        return KeyRecord(name=name.decode("utf-8"), digits=int(digits), secret=secret.decode("ascii"))
    except UnicodeDecodeError as e:
        raise MalformedLine(f"undecodable field: {e.reason}") from e


def parse_store(raw_bytes: bytes, *, strict: bool = True, source: Optional[str] = None) -> KeyStore:
    """Parse the full keychain content into a KeyStore.

    Blank and whitespace-only lines are ignored. A later line for an existing
    name replaces the earlier record.

    With ``strict`` (the default) the first malformed line aborts the parse
    with MalformedLine carrying its 1-based line number. Otherwise the line is
    skipped and its error recorded on ``KeyStore.skipped``.
    """
    records: Dict[str, KeyRecord] = {}
    skipped: List[MalformedLine] = []
    for lineno, line in enumerate(raw_bytes.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            rec = _to_record(*parse_line(line))
        except MalformedLine as e:
            err = e.at(lineno, source)
            if strict:
                raise err from e
            skipped.append(err)
            continue
        records[rec.name] = rec
    return KeyStore(records, skipped=skipped, source=source)
