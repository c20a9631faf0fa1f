"""
Upload field declarations.

Models declare upload fields either as plain names or with an options dict::

    image_fields = ['avatar', {'cover': {'width': 400, 'height': 400}}]
    file_fields = {'resume': {'path': 'resumes'}, 'cover_letter': None}
"""
import enum
from dataclasses import dataclass
from typing import Dict, Optional


class FieldKind(enum.Enum):
    IMAGE = 'image'
    FILE = 'file'


@dataclass(frozen=True)
class FieldDeclaration:
    """One upload attribute. ``options`` is None for name-only declarations."""
    name: str
    kind: FieldKind
    options: Optional[dict] = None

    @property
    def is_name_only(self) -> bool:
        return self.options is None

    def get_options(self) -> dict:
        return dict(self.options) if self.options else {}


Declarations = Dict[str, FieldDeclaration]


def normalize_declarations(fields, kind: FieldKind) -> Declarations:
    """
    Turn any supported declaration style into an ordered name -> declaration map.

    Args:
        fields: sequence of names, mapping of name -> options (None for
            name-only), or a sequence mixing names and mappings
        kind: kind assigned to every declaration

    Returns:
        Dict keyed by field name, in declaration order
    """
    declared = {}
    if not fields:
        return declared

    if isinstance(fields, dict):
        fields = [fields]
    elif isinstance(fields, str):
        fields = [fields]

    for entry in fields:
        if isinstance(entry, dict):
            for name, options in entry.items():
                declared[name] = FieldDeclaration(name, kind, options)
        else:
            declared[entry] = FieldDeclaration(entry, kind)

    return declared


def merge_declarations(*tables: Declarations) -> Declarations:
    """Merge tables left to right; later tables win on name collision."""
    merged = {}
    for table in tables:
        merged.update(table)
    return merged


def has_field(name: Optional[str], declared: Declarations) -> bool:
    return name is not None and name in declared


def as_options_map(declared: Declarations) -> Dict[str, dict]:
    """Public view of a declaration table: name -> options ({} if name-only)."""
    return {name: declaration.get_options() for name, declaration in declared.items()}
