"""Result assembly."""

from ambulatory_profile.reports.assembler import ReportAssembler

__all__ = ["ReportAssembler"]
