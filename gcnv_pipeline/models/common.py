import enum


class RunMode(enum.StrEnum):
    """Run mode of the germline CNV caller."""

    COHORT = "COHORT"
    """Fit a new coverage model and call CNVs for a cohort of samples"""
    CASE = "CASE"
    """Call CNVs with a previously fit coverage model"""
