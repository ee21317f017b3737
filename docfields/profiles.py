"""Document classes and their processing profiles.

Each document class maps to exactly one profile describing how its pages
are conditioned before OCR and which labelled fields are mined from the
recognised text.
"""

from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType


class DocumentClass(StrEnum):
    """Supported document classes."""

    IDENTITY_CARD = "identity_card"
    PASSPORT = "passport"
    INVOICE = "invoice"
    CONTRACT = "contract"
    MEDICAL_RECORD = "medical_record"


class FilterKind(StrEnum):
    """Convolution filter applied after the contrast stretch."""

    SHARPEN = "sharpen"
    DENOISE = "denoise"
    NONE = "none"


class FieldGroup(StrEnum):
    """Group of labelled field rules applied to a document class."""

    PERSONAL = "personal"
    INVOICE = "invoice"
    CONTRACT = "contract"
    MEDICAL = "medical"


@dataclass(frozen=True)
class DocumentProfile:
    """Preprocessing and extraction settings for one document class."""

    contrast_factor: float
    filter_kind: FilterKind
    field_group: FieldGroup
    validate_identity: bool = False


PROFILES: MappingProxyType[DocumentClass, DocumentProfile] = MappingProxyType(
    {
        # Official documents: stronger contrast and sharpening
        DocumentClass.IDENTITY_CARD: DocumentProfile(
            1.8, FilterKind.SHARPEN, FieldGroup.PERSONAL, validate_identity=True
        ),
        DocumentClass.PASSPORT: DocumentProfile(
            1.8, FilterKind.SHARPEN, FieldGroup.PERSONAL, validate_identity=True
        ),
        DocumentClass.INVOICE: DocumentProfile(
            1.3, FilterKind.NONE, FieldGroup.INVOICE
        ),
        DocumentClass.CONTRACT: DocumentProfile(
            1.3, FilterKind.NONE, FieldGroup.CONTRACT
        ),
        # Medical scans keep fine detail, so smooth instead of sharpen
        DocumentClass.MEDICAL_RECORD: DocumentProfile(
            1.5, FilterKind.DENOISE, FieldGroup.MEDICAL
        ),
    }
)


def get_profile(document_class: DocumentClass | str) -> DocumentProfile:
    """Look up the profile for a document class.

    Args:
        document_class: Enum member or its string value.

    Returns:
        The class's processing profile.

    Raises:
        ValueError: If the class is not one of :class:`DocumentClass`.
    """
    try:
        key = DocumentClass(document_class)
    except ValueError:
        raise ValueError(f"Unsupported document class: {document_class}") from None
    return PROFILES[key]
