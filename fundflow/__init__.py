"""FundFlow: a small banking API with beneficiaries and fund transfers."""

__version__ = "1.0.0"
