"""Raw descriptors produced by the structural parsers, before classification."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass
class RawColumn:
    name: str
    type_token: str
    constraints: str = ""
    nullable: bool = True
    primary_key: bool = False
    unique: bool = False
    is_list: bool = False
    default: Optional[str] = None
    type_format: Optional[str] = None


@dataclass
class RawForeignKey:
    columns: Tuple[str, ...]
    ref_table: str
    ref_columns: Tuple[str, ...]
    field_name: str = ""


@dataclass
class RawTable:
    name: str
    columns: List[RawColumn] = field(default_factory=list)
    foreign_keys: List[RawForeignKey] = field(default_factory=list)


@dataclass
class RawEnum:
    name: str
    values: List[str] = field(default_factory=list)


@dataclass
class RawDocument:
    source_format: str
    tables: List[RawTable] = field(default_factory=list)
    enums: List[RawEnum] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.tables and not self.enums
