"""Credentials derived from an application: username and initial password."""

from __future__ import annotations

import re
import unicodedata

_NON_LETTERS = re.compile(r"[^a-zA-Z]")


def _clean(text: str) -> str:
    """Strip accents and anything that is not an ASCII letter, lower-case the rest."""
    decomposed = unicodedata.normalize("NFD", text)
    without_marks = "".join(c for c in decomposed if unicodedata.category(c) != "Mn")
    return _NON_LETTERS.sub("", without_marks).lower()


def derive_username(first_name: str, last_name: str) -> str:
    """Build ``<initials>.<surname fragment>``.

    Initials come from every given name. One surname contributes its first
    four letters; two or more surnames contribute the first three letters of
    the first and the initial of the second.

    >>> derive_username("Ana", "Díaz")
    'a.diaz'
    >>> derive_username("José Luis", "Martínez López")
    'jl.marl'
    """
    initials = "".join(_clean(part)[:1] for part in first_name.split())
    surnames = [s for s in (_clean(part) for part in last_name.split()) if s]
    if not surnames:
        fragment = ""
    elif len(surnames) == 1:
        fragment = surnames[0][:4]
    else:
        fragment = surnames[0][:3] + surnames[1][:1]
    return f"{initials}.{fragment}"


def initial_password_from_dni(dni: str) -> str:
    """The first password is the ID document number without its check letter."""
    dni = dni.strip()
    return dni[:-1] if dni and dni[-1].isalpha() else dni
