from .bridge import FfiScannerBridge, ScanResult, ScannerBridge, resolve_library_path
from .decoding import decode_projects, encode_projects
from .exceptions import ScanCallError, ScanDecodeError, ScanError, ScannerUnavailableError

__all__ = [
    "FfiScannerBridge",
    "ScanCallError",
    "ScanDecodeError",
    "ScanError",
    "ScanResult",
    "ScannerBridge",
    "ScannerUnavailableError",
    "decode_projects",
    "encode_projects",
    "resolve_library_path",
]
