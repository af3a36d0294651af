"""Public interface for the ``bank_import`` package.

Symbol re-exports only; no runtime logic lives here.
"""

from .builder import parse_transactions
from .categorize import CATEGORIES, categorize
from .codec import decode_transactions, encode_transactions
from .duplicates import DedupKey, MergeResult, dedup_key, merge_transactions
from .errors import (
    AmountParseError,
    CsvImportError,
    EmptyFileError,
    ImportSupersededError,
    MissingColumnsError,
)
from .headers import map_header, normalize_header, resolve_header
from .ledger import TransactionLedger, open_ledger
from .models import HeaderMap, Transaction
from .normalizers import parse_amount, to_iso_date
from .store import BlobStore, FileBlobStore, MemoryBlobStore
from .tokenizer import DelimiterSniffer, FirstLineSniffer, tokenize

__all__ = [
    # Pipeline
    "tokenize",
    "map_header",
    "normalize_header",
    "resolve_header",
    "parse_amount",
    "to_iso_date",
    "categorize",
    "parse_transactions",
    "dedup_key",
    "merge_transactions",
    "encode_transactions",
    "decode_transactions",
    # Storage / orchestration
    "BlobStore",
    "FileBlobStore",
    "MemoryBlobStore",
    "TransactionLedger",
    "open_ledger",
    # Models / types
    "CATEGORIES",
    "DedupKey",
    "DelimiterSniffer",
    "FirstLineSniffer",
    "HeaderMap",
    "MergeResult",
    "Transaction",
    # Errors
    "AmountParseError",
    "CsvImportError",
    "EmptyFileError",
    "ImportSupersededError",
    "MissingColumnsError",
]
