"""Structure database, ABI and memory layout."""

from .abi import ABI as ABI
from .abi import AbiError as AbiError
from .abi import TypeInfo as TypeInfo
from .layout import LayoutError as LayoutError
from .layout import MemoryLayout as MemoryLayout
from .parser import DatabaseError as DatabaseError
from .parser import ValidationError as ValidationError
from .parser import load as load
from .parser import parse as parse
from .path import MalformedPath as MalformedPath
from .path import format_path as format_path
from .path import parse_path as parse_path
from .pointer import GlobalLookupError as GlobalLookupError
from .pointer import Pointer as Pointer
from .types import *
