"""
companydir - a company directory kept in a fixed-width flat file.
"""

__version__ = "0.1.0"
