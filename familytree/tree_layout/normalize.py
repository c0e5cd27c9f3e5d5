from __future__ import annotations
from typing import Optional

from .models import Member


def _year(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    year = str(value).strip()[:4]
    return year if year.isdigit() else None


def lifespan(member: Member) -> str:
    """
    Returns:
      'YYYY – YYYY' when both dates are known
      'YYYY –'      when only the birth year is known
      '– YYYY'      when only the death year is known
      ''            otherwise
    """
    born, died = _year(member.birth_date), _year(member.death_date)
    if born and died:
        return f"{born} – {died}"
    if born:
        return f"{born} –"
    if died:
        return f"– {died}"
    return ""


def display_label(member: Member) -> str:
    """Short two-line node label: first name over last name."""
    return f"{member.first_name}\n{member.last_name}"


def hover_label(member: Member) -> str:
    label = f"{member.first_name} {member.last_name}"
    span = lifespan(member)
    if span:
        label = f"{label} ({span})"
    return label
