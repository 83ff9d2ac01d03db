"""Known near-miss spellings of standard codesystem names.

A hit is a WARNING only; the concept is still accepted with the text as
written.
"""

from __future__ import annotations

# Lower-cased near-miss -> intended codesystem name
CODESYSTEM_TYPOS: dict[str, str] = {
    "snomed": "SNOMED CT",
    "snomedct": "SNOMED CT",
    "snomed-ct": "SNOMED CT",
    "snomed_ct": "SNOMED CT",
    "snowmed": "SNOMED CT",
    "snowmed ct": "SNOMED CT",
    "lonic": "LOINC",
    "loinic": "LOINC",
    "icd10": "ICD-10",
    "icd 10": "ICD-10",
    "icd_10": "ICD-10",
    "icdo3": "ICD-O-3",
    "icd-o3": "ICD-O-3",
    "icd o 3": "ICD-O-3",
    "palga thesaurus": "PALGA-thesaurus",
    "palgathesaurus": "PALGA-thesaurus",
}


def _normalize(text: str) -> str:
    return text.strip().lower()


def is_probable_typo(codesystem: str) -> bool:
    """True when ``codesystem`` matches a known misspelling (canonical names never match)."""
    key = _normalize(codesystem)
    if not key or key not in CODESYSTEM_TYPOS:
        return False
    return codesystem != CODESYSTEM_TYPOS[key]


def suggested_value(codesystem: str) -> str:
    """Intended codesystem name, or the input unchanged when it is not a known typo."""
    return CODESYSTEM_TYPOS.get(_normalize(codesystem), codesystem)
